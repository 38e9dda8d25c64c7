import hashlib

import pytest

from mgit import base
from mgit import data
from mgit.errors import ObjectNotFound


def test_hash_object_is_idempotent(repo):
    oid1 = data.hash_object(repo, b'hello\n')
    oid2 = data.hash_object(repo, b'hello\n')
    assert oid1 == oid2 == hashlib.sha1(b'hello\n').hexdigest()
    assert list(data.iter_objects(repo, 'blob')) == [oid1]
    assert data.get_object(repo, oid1) == b'hello\n'


def test_blobs_and_commits_are_separate(repo):
    oid = data.hash_object(repo, b'content', 'commit')
    assert data.has_object(repo, oid, 'commit')
    assert not data.has_object(repo, oid, 'blob')
    with pytest.raises(ObjectNotFound):
        data.get_object(repo, oid, 'blob')


def test_missing_object(repo):
    with pytest.raises(ObjectNotFound) as excinfo:
        data.get_object(repo, '0' * 40)
    assert excinfo.value.oid == '0' * 40
    assert isinstance(excinfo.value, LookupError)


def test_find_commit_by_prefix(repo):
    HEAD = data.get_head(repo)
    assert data.find_commit_by_prefix(repo, HEAD[:6]) == HEAD
    assert data.find_commit_by_prefix(repo, HEAD) == HEAD
    assert data.find_commit_by_prefix(repo, 'zzz') is None
    assert data.find_commit_by_prefix(repo, '') is None


def test_ambiguous_prefix_takes_first_sorted_match():
    repo = data.memory_repo()
    data.init(repo)
    repo.storage.put('commits', 'abc2', b'')
    repo.storage.put('commits', 'abc1', b'')
    repo.storage.put('commits', 'abd0', b'')
    assert data.find_commit_by_prefix(repo, 'abc') == 'abc1'
    assert data.find_commit_by_prefix(repo, 'abd') == 'abd0'


def test_refs(repo):
    HEAD = data.get_head(repo)
    data.update_ref(repo, 'feature', HEAD)
    assert data.get_ref(repo, 'feature') == HEAD
    assert list(data.iter_branch_names(repo)) == ['feature', 'master']
    data.delete_ref(repo, 'feature')
    assert data.get_ref(repo, 'feature') is None


def test_head_and_current_branch(repo):
    assert data.get_current_branch(repo) == base.DEFAULT_BRANCH
    data.set_current_branch(repo, 'other')
    data.set_head(repo, 'f' * 40)
    assert data.get_current_branch(repo) == 'other'
    assert data.get_head(repo) == 'f' * 40


def test_open_repo_uses_directory(tmp_path):
    repo = data.open_repo(str(tmp_path))
    assert not data.is_initialized(repo)
    base.init(repo)
    assert data.is_initialized(repo)
    assert (tmp_path / data.GIT_DIR_NAME).is_dir()
