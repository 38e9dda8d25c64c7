class MgitError(Exception):
    """Base class for repository integrity failures."""


class ObjectNotFound(MgitError, LookupError):
    def __init__(self, oid, type_):
        super().__init__(f'No {type_} object {oid}')
        self.oid = oid
        self.type_ = type_


class CorruptObject(MgitError, ValueError):
    pass
