"""
The staging area: pending additions and removals between the head commit
and the next commit. A path is never staged for both.
"""
from loguru import logger

from . import base
from . import data
from . import types

TO_ADD = 'staging/add'
TO_REMOVE = 'staging/remove'


def stage_add(repo: data.Repo, path: types.Path, oid: types.OID):
    repo.storage.delete(TO_ADD, path)
    repo.storage.delete(TO_REMOVE, path)
    if base.get_head_files(repo).get(path) == oid:
        logger.debug('{} matches HEAD, nothing staged', path)
        return
    repo.storage.put(TO_ADD, path, oid.encode())
    logger.debug('Staged {} ({}) for addition', path, oid)


def stage_remove(repo: data.Repo, path: types.Path):
    repo.storage.delete(TO_ADD, path)
    if path in base.get_head_files(repo):
        repo.storage.put(TO_REMOVE, path, b'')
        repo.worktree.delete(path)
        logger.debug('Staged {} for removal', path)


def add_file(repo: data.Repo, path: types.Path) -> types.OID:
    content = repo.worktree.read(path)
    assert content is not None, f'{path} is not in the working tree'
    oid = data.hash_object(repo, content)
    stage_add(repo, path, oid)
    return oid


def get_additions(repo: data.Repo) -> types.FileTable:
    return {path: repo.storage.get(TO_ADD, path).decode()
            for path in repo.storage.keys(TO_ADD)}


def get_removals(repo: data.Repo) -> list[types.Path]:
    return repo.storage.keys(TO_REMOVE)


def is_staged_for_addition(repo: data.Repo, path: types.Path) -> bool:
    return repo.storage.contains(TO_ADD, path)


def is_staged_for_removal(repo: data.Repo, path: types.Path) -> bool:
    return repo.storage.contains(TO_REMOVE, path)


def is_empty(repo: data.Repo) -> bool:
    return not repo.storage.keys(TO_ADD) and not repo.storage.keys(TO_REMOVE)


def clear(repo: data.Repo):
    for namespace in (TO_ADD, TO_REMOVE):
        for path in repo.storage.keys(namespace):
            repo.storage.delete(namespace, path)
    logger.debug('Cleared staging area')
