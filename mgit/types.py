from typing import TypeAlias, NamedTuple, Literal, Optional

Path: TypeAlias = str  # a path in the working tree, '/'-separated
OID: TypeAlias = str  # hash
FileTable: TypeAlias = dict[Path, OID]
ObjectType: TypeAlias = Literal['blob', 'commit']
Verdict: TypeAlias = Literal['take-given', 'delete', 'conflict', 'keep']
MergeStatus: TypeAlias = Literal['untracked', 'ancestor', 'fast-forward', 'merged', 'conflict']


class Commit(NamedTuple):
    message: str
    timestamp: str
    parents: tuple[OID, ...]
    files: FileTable

    @property
    def parent(self) -> Optional[OID]:
        return self.parents[0] if self.parents else None

    @property
    def second_parent(self) -> Optional[OID]:
        return self.parents[1] if len(self.parents) > 1 else None


class MergeResult(NamedTuple):
    status: MergeStatus
    conflicts: tuple[Path, ...] = ()
    commit: Optional[OID] = None


class Status(NamedTuple):
    branches: list[str]
    current_branch: str
    staged: list[Path]
    removed: list[Path]
    modified: list[str]
    untracked: list[Path]
