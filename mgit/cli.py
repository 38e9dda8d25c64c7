import argparse
import os
import sys

from . import base
from . import data
from .log import configure, LOG_LEVEL_ENV, DEFAULT_LEVEL
from . import merge as merge_
from . import staging

UNTRACKED_IN_THE_WAY = 'There is an untracked file in the way; delete it, or add and commit it first.'


class UsageError(Exception):
    pass


def main(argv=None) -> int:
    configure(os.environ.get(LOG_LEVEL_ENV, DEFAULT_LEVEL))
    args = parse_args(argv)
    repo = data.open_repo(os.getcwd())
    if args.command != 'init' and not data.is_initialized(repo):
        print('Not in an initialized Gitlet directory.')
        return 0
    try:
        args.func(repo, args)
    except UsageError:
        print('Incorrect operands.')
    return 0


class _Parser(argparse.ArgumentParser):
    """Report usage errors with a single line instead of argparse's usage dump."""

    def error(self, message):
        if 'invalid choice' in message:
            print('No command with that name exists.')
        elif 'required: command' in message:
            print('Please enter a command.')
        else:
            print('Incorrect operands.')
        sys.exit(0)


def parse_args(argv=None):
    parser = _Parser(prog='mgit')
    commands = parser.add_subparsers(dest='command', parser_class=_Parser)
    commands.required = True

    init_parser = commands.add_parser('init')
    init_parser.set_defaults(func=init)

    add_parser = commands.add_parser('add')
    add_parser.set_defaults(func=add)
    add_parser.add_argument('file')

    commit_parser = commands.add_parser('commit')
    commit_parser.set_defaults(func=commit)
    commit_parser.add_argument('message')

    rm_parser = commands.add_parser('rm')
    rm_parser.set_defaults(func=rm)
    rm_parser.add_argument('file')

    log_parser = commands.add_parser('log')
    log_parser.set_defaults(func=log)

    global_log_parser = commands.add_parser('global-log')
    global_log_parser.set_defaults(func=global_log)

    find_parser = commands.add_parser('find')
    find_parser.set_defaults(func=find)
    find_parser.add_argument('message')

    status_parser = commands.add_parser('status')
    status_parser.set_defaults(func=status)

    checkout_parser = commands.add_parser('checkout')
    checkout_parser.set_defaults(func=checkout)
    # '--' must reach the handler, so argparse leaves these operands alone
    checkout_parser.add_argument('operands', nargs=argparse.REMAINDER)

    branch_parser = commands.add_parser('branch')
    branch_parser.set_defaults(func=branch)
    branch_parser.add_argument('name')

    rm_branch_parser = commands.add_parser('rm-branch')
    rm_branch_parser.set_defaults(func=rm_branch)
    rm_branch_parser.add_argument('name')

    reset_parser = commands.add_parser('reset')
    reset_parser.set_defaults(func=reset)
    reset_parser.add_argument('commit')

    merge_parser = commands.add_parser('merge')
    merge_parser.set_defaults(func=merge)
    merge_parser.add_argument('branch')

    return parser.parse_args(argv)


def init(repo, args):
    if data.is_initialized(repo):
        print('A Gitlet version-control system already exists in the current directory.')
        return
    base.init(repo)


def _normalize(path):
    return os.path.relpath(path).replace('\\', '/')


def add(repo, args):
    args.file = _normalize(args.file)
    if not repo.worktree.exists(args.file):
        print('File does not exist.')
        return
    staging.add_file(repo, args.file)


def commit(repo, args):
    if not args.message:
        print('Please enter a commit message.')
        return
    if staging.is_empty(repo):
        print('No changes added to the commit.')
        return
    base.create_commit(repo, args.message)


def rm(repo, args):
    args.file = _normalize(args.file)
    if (not staging.is_staged_for_addition(repo, args.file)
            and args.file not in base.get_head_files(repo)):
        print('No reason to remove the file.')
        return
    staging.stage_remove(repo, args.file)


def _print_commit(oid, commit_):
    print('===')
    print(f'commit {oid}')
    if commit_.second_parent:
        print(f'Merge: {commit_.parent[:7]} {commit_.second_parent[:7]}')
    print(f'Date: {commit_.timestamp}')
    print(commit_.message)
    print('')


def log(repo, args):
    for oid, commit_ in base.iter_log(repo):
        _print_commit(oid, commit_)


def global_log(repo, args):
    for oid, commit_ in base.iter_all_commits(repo):
        _print_commit(oid, commit_)


def find(repo, args):
    oids = base.find_commits(repo, args.message)
    if not oids:
        print('Found no commit with that message.')
    for oid in oids:
        print(oid)


def status(repo, args):
    status_ = base.get_status(repo)
    sections = [
        ('Branches', [f'*{name}' if name == status_.current_branch else name
                      for name in status_.branches]),
        ('Staged Files', status_.staged),
        ('Removed Files', status_.removed),
        ('Modifications Not Staged For Commit', status_.modified),
        ('Untracked Files', status_.untracked),
    ]
    for title, lines in sections:
        print(f'=== {title} ===')
        for line in lines:
            print(line)
        print('')


def checkout(repo, args):
    operands = args.operands
    if len(operands) == 2 and operands[0] == '--':
        _checkout_file(repo, data.get_head(repo), _normalize(operands[1]))
    elif len(operands) == 3 and operands[1] == '--':
        oid = data.find_commit_by_prefix(repo, operands[0])
        if oid is None:
            print('No commit with that id exists.')
            return
        _checkout_file(repo, oid, _normalize(operands[2]))
    elif len(operands) == 1 and operands[0] != '--':
        _checkout_branch(repo, operands[0])
    else:
        raise UsageError(operands)


def _checkout_file(repo, oid, path):
    if path not in base.get_commit(repo, oid).files:
        print('File does not exist in that commit.')
        return
    base.checkout_file(repo, oid, path)


def _checkout_branch(repo, name):
    if not base.is_branch(repo, name):
        print('No such branch exists.')
    elif name == data.get_current_branch(repo):
        print('No need to checkout the current branch.')
    elif base.untracked_in_the_way(repo, base.get_branch_commit(repo, name)):
        print(UNTRACKED_IN_THE_WAY)
    else:
        base.checkout_branch(repo, name)


def branch(repo, args):
    if base.is_branch(repo, args.name):
        print('A branch with that name already exists.')
        return
    base.create_branch(repo, args.name)


def rm_branch(repo, args):
    if not base.is_branch(repo, args.name):
        print('A branch with that name does not exist.')
    elif args.name == data.get_current_branch(repo):
        print('Cannot remove the current branch.')
    else:
        base.remove_branch(repo, args.name)


def reset(repo, args):
    oid = data.find_commit_by_prefix(repo, args.commit)
    if oid is None:
        print('No commit with that id exists.')
    elif base.untracked_in_the_way(repo, oid):
        print(UNTRACKED_IN_THE_WAY)
    else:
        base.reset_to(repo, oid)


def merge(repo, args):
    if not staging.is_empty(repo):
        print('You have uncommitted changes.')
        return
    if not base.is_branch(repo, args.branch):
        print('A branch with that name does not exist.')
        return
    if args.branch == data.get_current_branch(repo):
        print('Cannot merge a branch with itself.')
        return

    result = merge_.merge(repo, args.branch)
    if result.status == 'untracked':
        print(UNTRACKED_IN_THE_WAY)
    elif result.status == 'ancestor':
        print('Given branch is an ancestor of the current branch.')
    elif result.status == 'fast-forward':
        print('Current branch fast-forwarded.')
    elif result.status == 'conflict':
        print('Encountered a merge conflict.')
