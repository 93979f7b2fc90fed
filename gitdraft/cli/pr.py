"""`gitdraft pr create`: draft a pull request for the current branch and open it."""

import argparse
import sys

from gitdraft.config import Config
from gitdraft.errors import InputError, UserCancelled
from gitdraft.git import GitAnalyzer, GitError, PushStatus, parse_diff_summary
from gitdraft.github import (
    GitHubCLI,
    GitHubError,
    PullRequestInfo,
    RepoInfo,
    find_pull_request_template,
    normalize_owners,
    repo_info_from_remote_url,
)
from gitdraft.llm import Draft
from gitdraft.output import Style, print_debug, print_success
from gitdraft.output.markdown import render_markdown
from gitdraft.prompts import PullRequestInput
from gitdraft.ui import (
    PR_CREATE_LABELS,
    PR_UPDATE_LABELS,
    Flow,
    confirmation_for,
    new_session,
    parse_commit_lines,
)
from gitdraft.ui.keys import prompt_yes_no
from gitdraft.ui.state import format_context
from gitdraft.cli.utils import (
    Timer,
    apply_shared_overrides,
    build_generator,
    finish_confirmation,
    print_generation_stats,
    run_with_spinner,
)


def head_owners(remote_url: str, current: RepoInfo, base: RepoInfo) -> list[str]:
    """Owners whose fork may hold the head branch: push remote, current repo, base repo."""
    owners = []
    remote_repo = repo_info_from_remote_url(remote_url) if remote_url else None
    if remote_repo is not None:
        owners.append(remote_repo.owner)
    owners += [current.owner, base.owner]
    return normalize_owners(owners)


def ensure_branch_pushed(git: GitAnalyzer, branch: str, context: str, style: Style,
                         assume_yes: bool = False) -> None:
    """Offer to push when HEAD is not on the remote yet. Declining cancels the run."""
    status = git.push_status(branch)
    if status.head_pushed:
        return

    remote = status.remote_name or "origin"
    if not assume_yes:
        if context.strip():
            print(f"{context}\n", file=sys.stderr)
        prompt = f"Current branch is not pushed to {remote}. Push now? (y)es / (n)o"
        if not prompt_yes_no(prompt, style):
            raise UserCancelled("Push cancelled.")

    run_with_spinner("Pushing branch...", style, git.push, branch, status)
    print_success("Push succeeded", style)


def _load_template(git: GitAnalyzer, gh: GitHubCLI, owner: str, style: Style, verbose: bool):
    token = ""
    try:
        token = gh.auth_token()
    except GitHubError as e:
        # Local templates still work without a token
        print_debug(f"No GitHub token, skipping organization template: {e}", style, verbose)
    return find_pull_request_template(git.repo_root(), token=token, owner=owner)


def _print_dry_run(draft: Draft, style: Style, render: bool) -> None:
    print(f"Title:\n{draft.title}\n")
    body = render_markdown(draft.body, style) if render else draft.body
    print(f"Body:\n{body}")


def _report(draft: Draft, detail: str, style: Style) -> None:
    print_success(detail, style)
    print(style.bold(draft.title))


def run_pr_create(args: argparse.Namespace, config: Config, style: Style) -> int:
    apply_shared_overrides(args, config, "pr")
    render = config.render_markdown and not args.no_render
    timer = Timer()

    git = GitAnalyzer()
    gh = GitHubCLI()

    current, parent = gh.repo_info()
    base_repo = parent or current
    branch = git.current_branch()
    status: PushStatus = git.push_status(branch)

    try:
        remote_url = git.remote_url(status.remote_name or "origin")
    except GitError:
        remote_url = ""
    owners = head_owners(remote_url, current, base_repo)
    print_debug(f"Base repository: {base_repo.full_name}, head owners: {', '.join(owners)}", style, args.verbose)

    existing: PullRequestInfo | None = gh.find_pull_request(base_repo.full_name, branch, owners)
    if existing is not None and not args.update:
        print(f"Pull request already exists for branch {branch} ({existing.state_label}): "
              f"#{existing.number} {existing.title} ({existing.url})", file=sys.stderr)
        print(style.dim("Use --update to regenerate its title and body."), file=sys.stderr)
        return 0
    updating = existing is not None

    template = _load_template(git, gh, base_repo.owner, style, args.verbose)
    base_branch = git.default_base_branch()
    base_ref = f"origin/{base_branch}"

    commit_log = git.commit_log(base_ref, "HEAD")
    if not commit_log:
        raise InputError(f"No commits found between {base_ref} and {branch}")
    diff_stat = git.diff_stat(base_ref, "HEAD")
    diff = git.diff(base_ref, "HEAD")
    if not diff:
        raise InputError(f"No committed changes found between {base_ref} and {branch}")
    timer.mark("git")

    summary = parse_diff_summary(diff)
    commits = parse_commit_lines(commit_log)
    if not args.dry_run:
        context = format_context(summary, style, commits, config.max_file_display)
        ensure_branch_pushed(git, branch, context, style, assume_yes=args.yes)

    if template is not None:
        print(style.dim(f"Using {template.source} template: {template.path}"), file=sys.stderr)

    data = PullRequestInput(
        base_branch=base_branch,
        head_branch=branch,
        commit_log=commit_log,
        diff_stat=diff_stat,
        diff=diff,
        template=template.content if template else "",
        language=config.pr_language,
    )
    generator = build_generator(args, config, "pr")

    def generate(on_chunk=None) -> Draft:
        return generator.generate_pull_request(data, on_chunk)

    def write(draft: Draft) -> str:
        if updating:
            gh.update_pull_request(existing.number, draft.title, draft.body)
            return f"Pull request updated (#{existing.number})"
        result = gh.create_pull_request(draft.title, draft.body, base_branch, draft=args.draft)
        header = f"Pull request created (#{result.number})" if result.number else "Pull request created"
        if args.draft:
            header += " (draft)"
        return f"{header}\n{result.url}" if result.url else header

    if args.dry_run or args.yes:
        draft = run_with_spinner("Generating pull request message...", style, generate)
        timer.mark("generate")
        print_generation_stats(generator, timer, style, args.verbose)
        if args.dry_run:
            _print_dry_run(draft, style, render)
            return 0
        writing = PR_UPDATE_LABELS.writing if updating else PR_CREATE_LABELS.writing
        detail = run_with_spinner(writing, style, write, draft)
    else:
        runner = confirmation_for(
            config.confirm_mode,
            new_session(Flow.PULL_REQUEST, PR_UPDATE_LABELS if updating else PR_CREATE_LABELS),
            generate,
            write,
            summary,
            style,
            commits=commits,
            body_renderer=render_markdown if render else None,
            max_files=config.max_file_display,
        )
        result = runner.run()
        timer.mark("confirm")
        print_generation_stats(generator, timer, style, args.verbose)
        finish_confirmation(result, "Pull request cancelled.")
        draft, detail = result.draft, result.detail

    header, _, url = detail.partition("\n")
    _report(draft, header, style)
    url = url or (existing.url if updating else "")
    if url:
        print(url)
    return 0
