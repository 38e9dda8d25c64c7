"""
Three-way merge of a branch into the current branch.

The split point of the two tips is found by walking the commit graph, every
path of the three file tables is classified once against it, and a single
pass then applies the verdicts to the working tree and the staging area
before the two-parent merge commit is written.
"""
from collections import defaultdict
from typing import Iterable, Optional

from loguru import logger
from typing_extensions import Unpack

from . import base
from . import data
from . import staging
from . import types

CONFLICT_START = b'<<<<<<< HEAD\n'
CONFLICT_SEPARATOR = b'=======\n'
CONFLICT_END = b'>>>>>>>\n'


def get_split_point(repo: data.Repo, head: types.OID, other: types.OID) -> types.OID:
    """
    Return the first ancestor of `head`, in breadth-first order with first
    parents ahead of second parents, that is also an ancestor of `other`.

    When the graph has several merge bases this is not necessarily the
    lowest one, only a deterministic one.
    """
    other_ancestors = base.ancestors_of(repo, other)

    for oid in base.iter_commits_and_parents(repo, {head}):
        if oid in other_ancestors:
            return oid

    assert False, 'A split point must exist'


def compare_trees(*trees: types.FileTable) -> Iterable[tuple[types.Path, Unpack[tuple[Optional[types.OID], ...]]]]:
    entries = defaultdict(lambda: [None] * len(trees))
    for i, tree in enumerate(trees):
        for path, oid in tree.items():
            entries[path][i] = oid

    for path in sorted(entries):
        yield path, *entries[path]


def classify(o_split: Optional[types.OID], o_current: Optional[types.OID],
             o_given: Optional[types.OID]) -> types.Verdict:
    if o_split is not None:
        if o_current == o_split:
            if o_given is None:
                return 'delete'
            if o_given != o_split:
                return 'take-given'
            return 'keep'
        if o_current is not None and o_given is None:
            return 'conflict'
        if o_current is None and o_given is not None and o_given != o_split:
            return 'conflict'
        if (o_current is not None and o_given is not None
                and o_given != o_split and o_current != o_given):
            return 'conflict'
        return 'keep'

    if o_given is None:
        return 'keep'
    if o_current is None:
        return 'take-given'
    if o_current != o_given:
        return 'conflict'
    return 'keep'


def conflict_content(current: Optional[bytes], given: Optional[bytes]) -> bytes:
    return (CONFLICT_START + (current or b'') +
            CONFLICT_SEPARATOR + (given or b'') +
            CONFLICT_END)


def _read_blob(repo, oid):
    return data.get_object(repo, oid) if oid else None


def merge_trees(repo: data.Repo, t_split: types.FileTable, t_current: types.FileTable,
                t_given: types.FileTable) -> list[types.Path]:
    """Apply every path's verdict; return the paths left in conflict."""
    conflicts = []
    for path, o_split, o_current, o_given in compare_trees(t_split, t_current, t_given):
        verdict = classify(o_split, o_current, o_given)
        if verdict == 'keep':
            continue
        logger.debug('{}: {}', path, verdict)

        if verdict == 'take-given':
            repo.worktree.write(path, data.get_object(repo, o_given))
            staging.stage_add(repo, path, o_given)
        elif verdict == 'delete':
            staging.stage_remove(repo, path)
        elif verdict == 'conflict':
            content = conflict_content(_read_blob(repo, o_current), _read_blob(repo, o_given))
            repo.worktree.write(path, content)
            staging.stage_add(repo, path, data.hash_object(repo, content))
            conflicts.append(path)
        else:
            raise AssertionError(f'Unknown verdict {verdict}')
    return conflicts


def merge(repo: data.Repo, branch: str) -> types.MergeResult:
    HEAD = data.get_head(repo)
    other = base.get_branch_commit(repo, branch)
    split_point = get_split_point(repo, HEAD, other)

    if base.untracked_in_the_way(repo, other):
        return types.MergeResult(status='untracked')
    if split_point == other:
        return types.MergeResult(status='ancestor')
    if split_point == HEAD:
        base.reset_to(repo, other)
        logger.debug('Fast-forwarded {} to {}', data.get_current_branch(repo), other)
        return types.MergeResult(status='fast-forward', commit=other)

    conflicts = merge_trees(repo,
                            base.get_commit(repo, split_point).files,
                            base.get_commit(repo, HEAD).files,
                            base.get_commit(repo, other).files)

    current_branch = data.get_current_branch(repo)
    oid = base.create_merge_commit(repo, f'Merged {branch} into {current_branch}.', other)
    if conflicts:
        logger.info('Merge of {} left {} conflicting files', branch, len(conflicts))
        return types.MergeResult(status='conflict', conflicts=tuple(conflicts), commit=oid)
    return types.MergeResult(status='merged', commit=oid)
