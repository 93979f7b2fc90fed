"""CLI Main Entry Point"""

import argparse
import sys

from gitdraft.config import Config, load_config
from gitdraft.errors import ExternalToolError, InputError, UserCancelled
from gitdraft.git import DiffProcessor, GitAnalyzer, parse_diff_summary
from gitdraft.llm import Draft
from gitdraft.output import Style, colorize_commit_type, print_debug, print_error, print_success
from gitdraft.prompts import PromptConfig
from gitdraft.ui import COMMIT_LABELS, Flow, confirmation_for, new_session

from gitdraft.cli.args import parse_args
from gitdraft.cli.commands import display_config, run_install_completion
from gitdraft.cli.pr import run_pr_create
from gitdraft.cli.utils import (
    Timer,
    apply_shared_overrides,
    build_generator,
    finish_confirmation,
    print_generation_stats,
    run_with_spinner,
)


def _display_message(message: str, style: Style) -> None:
    """Commit message between horizontal rules, type colored."""
    lines = colorize_commit_type(message, style).split('\n')
    width = max((len(line) for line in message.split('\n')), default=40)
    print(style.dim(style.rule * width))
    print(style.bold(lines[0]))
    for line in lines[1:]:
        print(line)
    print(style.dim(style.rule * width))


def _apply_commit_overrides(args: argparse.Namespace, config: Config) -> None:
    apply_shared_overrides(args, config, "commit")
    if args.style:
        config.style = args.style
    if args.no_body:
        config.include_body = False


def _commit_summary(output: str) -> str:
    """First line of `git commit` output, e.g. `[main 1a2b3c4] feat: ...`."""
    return output.strip().split('\n', 1)[0]


def run_commit(args: argparse.Namespace, config: Config, style: Style) -> int:
    """Generate a message for the staged changes, confirm it and commit."""
    _apply_commit_overrides(args, config)
    timer = Timer()

    git = GitAnalyzer()
    diff = git.staged_diff()
    if not diff.strip():
        raise InputError("No staged changes. Run 'git add' first.")
    timer.mark("git")

    summary = parse_diff_summary(diff)
    processed = DiffProcessor().process(diff, summary)
    timer.mark("diff")
    print_debug(
        f"{processed.total_files} files, {processed.included_files} in prompt, "
        f"{processed.filtered_files} noise files filtered"
        + (", diff truncated" if processed.truncated else ""),
        style, args.verbose,
    )

    prompt_config = PromptConfig(
        hint=args.hint,
        forced_type=args.type,
        language=config.commit_language,
        style=config.style,
        include_body=config.include_body,
        max_subject_length=config.max_subject_length,
    )
    generator = build_generator(args, config, "commit")

    def generate(on_chunk=None) -> Draft:
        return generator.generate_commit_message(processed, prompt_config, on_chunk)

    def write(draft: Draft) -> str:
        return _commit_summary(git.commit(draft.body))

    if args.dry_run or args.yes:
        draft = run_with_spinner(f"Generating commit message with {generator.name}...", style, generate)
        timer.mark("generate")
        print_generation_stats(generator, timer, style, args.verbose)
        if args.dry_run:
            # Raw message on stdout so it can be piped
            print(draft.body)
            return 0
        detail = run_with_spinner(COMMIT_LABELS.writing, style, write, draft)
    else:
        runner = confirmation_for(
            config.confirm_mode,
            new_session(Flow.COMMIT),
            generate,
            write,
            summary,
            style,
            max_files=config.max_file_display,
        )
        result = runner.run()
        timer.mark("confirm")
        print_generation_stats(generator, timer, style, args.verbose)
        finish_confirmation(result, "Commit cancelled.")
        draft, detail = result.draft, result.detail

    print_success("Commit successful", style)
    _display_message(draft.body, style)
    if detail:
        print(style.dim(detail))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    config = load_config()
    if args.color:
        config.color = args.color
    style = Style.detect("never" if not config.use_color() else config.color)

    try:
        if args.command == 'commit':
            return run_commit(args, config, style)
        if args.command == 'pr':
            return run_pr_create(args, config, style)
        if args.command == 'config':
            return display_config(config, style)
        return run_install_completion(style)
    except UserCancelled as e:
        if str(e):
            print(style.dim(str(e)), file=sys.stderr)
        return 0
    except (InputError, ExternalToolError) as e:
        print_error(str(e), style)
        return 1
