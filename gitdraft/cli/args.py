"""CLI Argument Parsing"""

import argparse
import argcomplete

from gitdraft import COMMIT_TYPE_NAMES, __version__

PROVIDERS = ['auto', 'ollama', 'claude', 'vertex']
CONFIRM_MODES = ['prompt', 'tui']


def _add_shared_options(parser: argparse.ArgumentParser) -> None:
    """Options both drafting commands understand."""
    parser.add_argument('-m', '--model', type=str, metavar='MODEL', help='Model name')
    parser.add_argument('-p', '--provider', type=str, choices=PROVIDERS, help='LLM provider')
    parser.add_argument('--language', type=str, metavar='LANG', help='Language to write the draft in')
    parser.add_argument('-y', '--yes', action='store_true', help='Skip confirmation and write immediately')
    parser.add_argument('--dry-run', action='store_true', help='Print the draft only, change nothing')
    parser.add_argument('--confirm-mode', type=str, choices=CONFIRM_MODES, help='Confirmation front-end')
    parser.add_argument('--verbose', action='store_true', help='Show debug info (prompt size, tokens used)')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='gitdraft',
        description='Draft commit messages and pull requests with an LLM',
        epilog='Example: git add -p && gitdraft commit'
    )
    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--color', type=str, choices=['auto', 'always', 'never'], help='Colorize output')

    commands = parser.add_subparsers(dest='command', metavar='COMMAND')
    commands.required = True

    commit = commands.add_parser('commit', help='Generate a commit message for staged changes and commit')
    commit.add_argument('--hint', type=str, metavar='TEXT', help='Add context: --hint "fixing the login bug"')
    commit.add_argument('-t', '--type', type=str, choices=COMMIT_TYPE_NAMES, help='Force commit type')
    commit.add_argument('-s', '--style', type=str, choices=['conventional', 'simple', 'detailed'], help='Commit message style')
    commit.add_argument('--no-body', action='store_true', help='Generate subject line only, no bullet points')
    _add_shared_options(commit)

    pr = commands.add_parser('pr', help='Pull request commands')
    pr_commands = pr.add_subparsers(dest='pr_command', metavar='COMMAND')
    pr_commands.required = True

    create = pr_commands.add_parser('create', help='Generate a pull request for the current branch and open it')
    create.add_argument('--draft', action='store_true', help='Open the pull request as a draft')
    create.add_argument('--update', action='store_true', help='Regenerate title and body of an existing pull request')
    create.add_argument('--no-render', action='store_true', help='Show the body as raw markdown')
    _add_shared_options(create)

    commands.add_parser('config', help='Show the effective configuration')
    commands.add_parser('completion', help='Show how to install shell tab completion')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)
