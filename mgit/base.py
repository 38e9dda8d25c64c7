import itertools
import operator
from collections import deque
from datetime import datetime
from typing import Iterable, Optional

from loguru import logger

from . import data
from . import staging
from . import types
from .errors import CorruptObject

DEFAULT_BRANCH = 'master'
INITIAL_MESSAGE = 'initial commit'
INITIAL_TIMESTAMP = 'Wed Dec 31 16:00:00 1969 -0800'


def init(repo: data.Repo) -> types.OID:
    data.init(repo)
    root = types.Commit(message=INITIAL_MESSAGE, timestamp=INITIAL_TIMESTAMP, parents=(), files={})
    oid = data.hash_object(repo, serialize_commit(root), 'commit')
    data.update_ref(repo, DEFAULT_BRANCH, oid)
    data.set_current_branch(repo, DEFAULT_BRANCH)
    data.set_head(repo, oid)
    return oid


def format_timestamp(moment: datetime) -> str:
    return f'{moment:%a %b} {moment.day} {moment:%H:%M:%S %Y %z}'


def serialize_commit(commit_: types.Commit) -> bytes:
    assert len(commit_.parents) <= 2, 'A commit has at most two parents'
    text = f'timestamp {commit_.timestamp}\n'
    for parent in commit_.parents:
        text += f'parent {parent}\n'
    for path, oid in commit_.files.items():
        text += f'file {oid} {path}\n'
    text += '\n'
    text += commit_.message
    return text.encode()


def get_commit(repo: data.Repo, oid: types.OID) -> types.Commit:
    timestamp = None
    parents = []
    files = {}
    lines = iter(data.get_object(repo, oid, 'commit').decode().split('\n'))
    for line in itertools.takewhile(operator.truth, lines):  # an empty line separates the header from the message
        key, value = line.split(' ', 1)
        if key == 'timestamp':
            timestamp = value
        elif key == 'parent':
            parents.append(value)
        elif key == 'file':
            blob, path = value.split(' ', 1)
            files[path] = blob
        else:
            raise CorruptObject(f'Unknown field {key} in commit {oid}')

    if timestamp is None:
        raise CorruptObject(f'Commit {oid} has no timestamp')
    message = '\n'.join(lines)
    return types.Commit(message=message, timestamp=timestamp, parents=tuple(parents), files=files)


def get_head_commit(repo: data.Repo) -> types.Commit:
    return get_commit(repo, data.get_head(repo))


def get_head_files(repo: data.Repo) -> types.FileTable:
    return get_head_commit(repo).files


def get_branch_commit(repo: data.Repo, name: str) -> types.OID:
    oid = data.get_ref(repo, name)
    assert oid, f'Unknown branch {name}'
    return oid


def create_commit(repo: data.Repo, message: str, second_parent: Optional[types.OID] = None) -> types.OID:
    HEAD = data.get_head(repo)
    files = dict(get_commit(repo, HEAD).files)
    files.update(staging.get_additions(repo))
    for path in staging.get_removals(repo):
        files.pop(path, None)

    parents = (HEAD, second_parent) if second_parent else (HEAD,)
    commit_ = types.Commit(message=message,
                           timestamp=format_timestamp(datetime.now().astimezone()),
                           parents=parents,
                           files=files)
    oid = data.hash_object(repo, serialize_commit(commit_), 'commit')
    data.update_ref(repo, data.get_current_branch(repo), oid)
    data.set_head(repo, oid)
    staging.clear(repo)
    logger.debug('Committed {} with {} tracked files', oid, len(files))
    return oid


def create_merge_commit(repo: data.Repo, message: str, second_parent: types.OID) -> types.OID:
    return create_commit(repo, message, second_parent=second_parent)


def iter_commits_and_parents(repo: data.Repo, oids: Iterable[types.OID]) -> Iterable[types.OID]:
    oids = deque(oids)
    visited = set()

    while oids:
        oid = oids.popleft()
        if not oid or oid in visited:
            continue
        visited.add(oid)
        yield oid

        # first parent is queued before the second one
        oids.extend(get_commit(repo, oid).parents)


def ancestors_of(repo: data.Repo, oid: types.OID) -> set[types.OID]:
    return set(iter_commits_and_parents(repo, {oid}))


def iter_log(repo: data.Repo, oid: Optional[types.OID] = None) -> Iterable[tuple[types.OID, types.Commit]]:
    oid = oid or data.get_head(repo)
    while oid:
        commit_ = get_commit(repo, oid)
        yield oid, commit_
        oid = commit_.parent


def iter_all_commits(repo: data.Repo) -> Iterable[tuple[types.OID, types.Commit]]:
    for oid in data.iter_objects(repo, 'commit'):
        yield oid, get_commit(repo, oid)


def find_commits(repo: data.Repo, message: str) -> list[types.OID]:
    return [oid for oid, commit_ in iter_all_commits(repo) if commit_.message == message]


def is_branch(repo: data.Repo, name: str) -> bool:
    return data.get_ref(repo, name) is not None


def create_branch(repo: data.Repo, name: str, oid: Optional[types.OID] = None):
    data.update_ref(repo, name, oid or data.get_head(repo))


def remove_branch(repo: data.Repo, name: str):
    assert name != data.get_current_branch(repo), 'Cannot remove the current branch'
    data.delete_ref(repo, name)


def get_working_tree(repo: data.Repo) -> types.FileTable:
    return {path: data.hash_bytes(repo.worktree.read(path))
            for path in repo.worktree.list_files()}


def untracked_in_the_way(repo: data.Repo, oid: types.OID) -> list[types.Path]:
    """Working files that HEAD does not track but `oid` would overwrite."""
    head_files = get_head_files(repo)
    target_files = get_commit(repo, oid).files
    return [path for path, working_oid in get_working_tree(repo).items()
            if path not in head_files
            and path in target_files
            and target_files[path] != working_oid]


def checkout_file(repo: data.Repo, oid: types.OID, path: types.Path):
    blob = get_commit(repo, oid).files[path]
    repo.worktree.write(path, data.get_object(repo, blob))


def checkout_commit(repo: data.Repo, oid: types.OID):
    """
    Write every file tracked by `oid` into the working tree and delete the
    files HEAD tracks that `oid` does not. Files tracked by neither are left
    alone. HEAD itself is not moved.
    """
    files = get_commit(repo, oid).files
    for path, blob in files.items():
        repo.worktree.write(path, data.get_object(repo, blob))
    for path in get_head_files(repo):
        if path not in files:
            repo.worktree.delete(path)
    logger.debug('Checked out {} ({} files)', oid, len(files))


def checkout_branch(repo: data.Repo, name: str):
    oid = get_branch_commit(repo, name)
    checkout_commit(repo, oid)
    staging.clear(repo)
    data.set_current_branch(repo, name)
    data.set_head(repo, oid)


def reset_to(repo: data.Repo, oid: types.OID):
    checkout_commit(repo, oid)
    data.update_ref(repo, data.get_current_branch(repo), oid)
    data.set_head(repo, oid)
    staging.clear(repo)


def get_status(repo: data.Repo) -> types.Status:
    head_files = get_head_files(repo)
    additions = staging.get_additions(repo)
    removals = set(staging.get_removals(repo))
    working = get_working_tree(repo)

    modified = set()
    for path, oid in head_files.items():
        if path in working and path not in additions and path not in removals:
            if working[path] != oid:
                modified.add(f'{path} (modified)')
        elif path not in working and path not in removals:
            modified.add(f'{path} (deleted)')
    for path, oid in additions.items():
        if path not in working:
            modified.add(f'{path} (deleted)')
        elif working[path] != oid:
            modified.add(f'{path} (modified)')

    untracked = [path for path in working
                 if path not in additions and (path not in head_files or path in removals)]

    return types.Status(branches=list(data.iter_branch_names(repo)),
                        current_branch=data.get_current_branch(repo),
                        staged=sorted(additions),
                        removed=sorted(removals),
                        modified=sorted(modified),
                        untracked=sorted(untracked))
