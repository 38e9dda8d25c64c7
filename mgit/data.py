import os
import hashlib
from typing import Iterable, NamedTuple, Optional

from loguru import logger

from mgit import types
from mgit.errors import ObjectNotFound
from mgit.storage import (Storage, WorkTree, DirectoryStorage, DirectoryWorkTree,
                          MemoryStorage, MemoryWorkTree)

GIT_DIR_NAME = '.mgit'

OBJECT_NAMESPACES: dict[types.ObjectType, str] = {'blob': 'blobs', 'commit': 'commits'}
BRANCHES = 'branches'
META = 'meta'
HEAD = 'HEAD'
BRANCH = 'BRANCH'


class Repo(NamedTuple):
    storage: Storage
    worktree: WorkTree


def open_repo(root: str) -> Repo:
    return Repo(storage=DirectoryStorage(os.path.join(root, GIT_DIR_NAME)),
                worktree=DirectoryWorkTree(root))


def memory_repo(files: Optional[dict[types.Path, bytes]] = None) -> Repo:
    return Repo(storage=MemoryStorage(), worktree=MemoryWorkTree(files))


def is_initialized(repo: Repo) -> bool:
    return repo.storage.exists()


def init(repo: Repo):
    repo.storage.create()


def hash_bytes(data: bytes) -> types.OID:
    return hashlib.sha1(data).hexdigest()


def hash_object(repo: Repo, data: bytes, type_: types.ObjectType = 'blob') -> types.OID:
    oid = hash_bytes(data)
    namespace = OBJECT_NAMESPACES[type_]
    if not repo.storage.contains(namespace, oid):
        repo.storage.put(namespace, oid, data)
        logger.debug('Stored {} {}', type_, oid)
    return oid


def get_object(repo: Repo, oid: types.OID, type_: types.ObjectType = 'blob') -> bytes:
    content = repo.storage.get(OBJECT_NAMESPACES[type_], oid)
    if content is None:
        raise ObjectNotFound(oid, type_)
    return content


def has_object(repo: Repo, oid: types.OID, type_: types.ObjectType = 'blob') -> bool:
    return repo.storage.contains(OBJECT_NAMESPACES[type_], oid)


def iter_objects(repo: Repo, type_: types.ObjectType = 'blob') -> Iterable[types.OID]:
    yield from repo.storage.keys(OBJECT_NAMESPACES[type_])


def find_commit_by_prefix(repo: Repo, prefix: str) -> Optional[types.OID]:
    if not prefix:
        return None
    matches = [oid for oid in iter_objects(repo, 'commit') if oid.startswith(prefix)]
    if len(matches) > 1:
        logger.warning('Commit id {} is ambiguous ({} matches), using {}',
                       prefix, len(matches), matches[0])
    return matches[0] if matches else None


def update_ref(repo: Repo, name: str, oid: types.OID):
    assert oid
    repo.storage.put(BRANCHES, name, oid.encode())
    logger.debug('Branch {} -> {}', name, oid)


def get_ref(repo: Repo, name: str) -> Optional[types.OID]:
    value = repo.storage.get(BRANCHES, name)
    return value.decode().strip() if value is not None else None


def delete_ref(repo: Repo, name: str):
    repo.storage.delete(BRANCHES, name)
    logger.debug('Deleted branch {}', name)


def iter_branch_names(repo: Repo) -> Iterable[str]:
    yield from repo.storage.keys(BRANCHES)


def _get_slot(repo, slot):
    value = repo.storage.get(META, slot)
    assert value is not None, f'{slot} is not set'
    return value.decode().strip()


def get_head(repo: Repo) -> types.OID:
    return _get_slot(repo, HEAD)


def set_head(repo: Repo, oid: types.OID):
    repo.storage.put(META, HEAD, oid.encode())
    logger.debug('HEAD -> {}', oid)


def get_current_branch(repo: Repo) -> str:
    return _get_slot(repo, BRANCH)


def set_current_branch(repo: Repo, name: str):
    repo.storage.put(META, BRANCH, name.encode())
