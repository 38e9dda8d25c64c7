import pytest

from mgit import base
from mgit import data
from mgit import staging


@pytest.fixture
def repo():
    """An initialized repository kept entirely in memory."""
    repo_ = data.memory_repo()
    base.init(repo_)
    return repo_


@pytest.fixture
def disk_repo(tmp_path):
    """An initialized repository backed by a real directory."""
    repo_ = data.open_repo(str(tmp_path))
    base.init(repo_)
    return repo_


def write_and_add(repo, path, content):
    repo.worktree.write(path, content)
    return staging.add_file(repo, path)


def commit_files(repo, message, files):
    """Stage `files` (path -> bytes, None to remove) and commit them."""
    for path, content in files.items():
        if content is None:
            staging.stage_remove(repo, path)
        else:
            write_and_add(repo, path, content)
    return base.create_commit(repo, message)
