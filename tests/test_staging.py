from mgit import base
from mgit import data
from mgit import staging

from conftest import commit_files, write_and_add


def test_add_stages_new_file(repo):
    oid = write_and_add(repo, 'a.txt', b'one\n')
    assert staging.get_additions(repo) == {'a.txt': oid}
    assert data.get_object(repo, oid) == b'one\n'


def test_add_overwrites_previous_entry(repo):
    write_and_add(repo, 'a.txt', b'one\n')
    oid = write_and_add(repo, 'a.txt', b'two\n')
    assert staging.get_additions(repo) == {'a.txt': oid}


def test_add_identical_to_head_unstages(repo):
    commit_files(repo, 'add a', {'a.txt': b'one\n'})
    write_and_add(repo, 'a.txt', b'changed\n')
    assert staging.is_staged_for_addition(repo, 'a.txt')

    write_and_add(repo, 'a.txt', b'one\n')
    assert staging.is_empty(repo)


def test_add_cancels_removal(repo):
    commit_files(repo, 'add a', {'a.txt': b'one\n'})
    staging.stage_remove(repo, 'a.txt')
    assert staging.get_removals(repo) == ['a.txt']

    write_and_add(repo, 'a.txt', b'one\n')
    assert staging.is_empty(repo)


def test_remove_tracked_file(repo):
    commit_files(repo, 'add a', {'a.txt': b'one\n'})
    staging.stage_remove(repo, 'a.txt')
    assert staging.is_staged_for_removal(repo, 'a.txt')
    assert not repo.worktree.exists('a.txt')


def test_remove_staged_only_file_keeps_working_copy(repo):
    write_and_add(repo, 'new.txt', b'fresh\n')
    staging.stage_remove(repo, 'new.txt')
    assert staging.is_empty(repo)
    assert repo.worktree.read('new.txt') == b'fresh\n'


def test_add_and_remove_sets_stay_disjoint(repo):
    commit_files(repo, 'add a', {'a.txt': b'one\n'})
    write_and_add(repo, 'a.txt', b'two\n')
    staging.stage_remove(repo, 'a.txt')
    assert staging.get_additions(repo) == {}
    assert staging.get_removals(repo) == ['a.txt']


def test_clear(repo):
    commit_files(repo, 'add a', {'a.txt': b'one\n'})
    staging.stage_remove(repo, 'a.txt')
    write_and_add(repo, 'b.txt', b'two\n')
    staging.clear(repo)
    assert staging.is_empty(repo)


def test_staging_on_disk(disk_repo):
    write_and_add(disk_repo, 'dir/a.txt', b'one\n')
    assert list(staging.get_additions(disk_repo)) == ['dir/a.txt']
    base.create_commit(disk_repo, 'add dir/a.txt')
    assert base.get_head_files(disk_repo).keys() == {'dir/a.txt'}
