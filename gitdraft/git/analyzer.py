"""Git Analyzer - Read change context from git and write commits back."""

import subprocess
from dataclasses import dataclass

from gitdraft.errors import ExternalToolError


class GitError(ExternalToolError):
    """Raised when git operations fail."""
    pass


@dataclass
class PushStatus:
    """Where the current branch stands relative to its remote."""
    has_upstream: bool = False
    upstream_ref: str = ""
    remote_name: str = "origin"
    remote_ref: str = ""
    head_pushed: bool = False


def remote_name_from_ref(ref: str) -> str:
    name = ref.split('/', 1)[0].strip()
    return name or "origin"


class GitAnalyzer:
    """Runs git for change context and for the final commit/push."""

    def __init__(self, cwd: str | None = None, verify: bool = True):
        self.cwd = cwd
        if verify:
            self._verify_git_available()
            self._verify_in_repo()

    def _run(self, args: tuple[str, ...], input_text: str | None = None) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                ['git', *args],
                capture_output=True,
                text=True,
                input=input_text,
                cwd=self.cwd,
                encoding='utf-8',
                errors='replace'
            )
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

    def _run_git(self, *args: str, input_text: str | None = None) -> str:
        """Run a git command and return stdout."""
        result = self._run(args, input_text)
        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            raise GitError(f"Git command failed: git {' '.join(args)}\n{detail}".rstrip())
        return result.stdout

    def _exit_code(self, *args: str) -> tuple[int, str]:
        """Run a git command where a non-zero exit is an answer, not a failure."""
        result = self._run(args)
        return result.returncode, result.stdout

    def _verify_git_available(self) -> None:
        """Fail fast if git isn't available."""
        self._run_git('--version')

    def _verify_in_repo(self) -> None:
        """Fail fast if we're not in a git repository."""
        try:
            self._run_git('rev-parse', '--git-dir')
        except GitError:
            raise GitError("Not inside a git repository")

    # -- Repository facts --------------------------------------------------

    def repo_root(self) -> str:
        root = self._run_git('rev-parse', '--show-toplevel').strip()
        if not root:
            raise GitError("Repository root is empty")
        return root

    def current_branch(self) -> str:
        branch = self._run_git('rev-parse', '--abbrev-ref', 'HEAD').strip()
        if not branch:
            raise GitError("Current branch is empty")
        return branch

    def remote_url(self, remote_name: str) -> str:
        remote_name = remote_name.strip()
        if not remote_name:
            raise GitError("Remote name is empty")
        url = self._run_git('remote', 'get-url', remote_name).strip()
        if not url:
            raise GitError(f"Remote URL for {remote_name} is empty")
        return url

    def default_base_branch(self) -> str:
        """Default branch of origin: origin/HEAD first, then `git remote show`."""
        code, output = self._exit_code('symbolic-ref', '--quiet', '--short', 'refs/remotes/origin/HEAD')
        ref = output.strip()
        if code == 0 and ref.startswith('origin/') and len(ref) > len('origin/'):
            return ref[len('origin/'):]

        output = self._run_git('remote', 'show', 'origin')
        prefix = 'HEAD branch: '
        for line in output.splitlines():
            line = line.strip()
            if line.startswith(prefix):
                branch = line[len(prefix):].strip()
                if branch and branch != '(unknown)':
                    return branch
        raise GitError("Failed to determine base branch: HEAD branch not found in origin remote info")

    # -- Change context ----------------------------------------------------

    def staged_diff(self) -> str:
        """The diff of what `git commit` would record."""
        return self._run_git('--no-pager', 'diff', '--staged')

    def diff(self, base: str, head: str) -> str:
        return self._run_git('--no-pager', 'diff', '-U5', f'{base}...{head}').strip()

    def diff_stat(self, base: str, head: str) -> str:
        return self._run_git('--no-pager', 'diff', '--stat', f'{base}...{head}').strip()

    def commit_log(self, base: str, head: str) -> str:
        """One `<short-sha> <subject>` line per commit, oldest first."""
        return self._run_git('log', '--reverse', '--format=%h %s', f'{base}..{head}').strip()

    # -- Push state --------------------------------------------------------

    def _upstream_ref(self) -> str | None:
        code, output = self._exit_code('rev-parse', '--abbrev-ref', '--symbolic-full-name', '@{u}')
        if code == 128:
            return None
        if code != 0:
            raise GitError("Failed to determine upstream branch")
        return output.strip() or None

    def _is_ancestor(self, ancestor: str, descendant: str) -> bool:
        code, _ = self._exit_code('merge-base', '--is-ancestor', ancestor, descendant)
        if code == 0:
            return True
        if code == 1:
            return False
        raise GitError(f"Failed to compare git refs {ancestor} and {descendant}")

    def _remote_branch_exists(self, remote_ref: str) -> bool:
        code, _ = self._exit_code('show-ref', '--verify', '--quiet', f'refs/remotes/{remote_ref}')
        if code == 0:
            return True
        if code == 1:
            return False
        raise GitError(f"Failed to check remote branch {remote_ref}")

    def push_status(self, branch: str) -> PushStatus:
        upstream = self._upstream_ref()
        if upstream:
            return PushStatus(
                has_upstream=True,
                upstream_ref=upstream,
                remote_name=remote_name_from_ref(upstream),
                remote_ref=upstream,
                head_pushed=self._is_ancestor('HEAD', upstream),
            )

        status = PushStatus(remote_name="origin", remote_ref=f"origin/{branch}")
        if self._remote_branch_exists(status.remote_ref):
            status.head_pushed = self._is_ancestor('HEAD', status.remote_ref)
        return status

    # -- Writes ------------------------------------------------------------

    def push(self, branch: str, status: PushStatus) -> str:
        """Push the branch, setting an upstream when it has none."""
        if status.has_upstream:
            args = ('push',)
        else:
            args = ('push', '-u', status.remote_name or 'origin', branch)
        result = self._run(args)
        if result.returncode != 0:
            detail = '\n'.join(p.strip() for p in (result.stdout, result.stderr) if p.strip())
            raise GitError(f"Failed to push branch\n{detail}".rstrip())
        return (result.stdout + result.stderr).strip()

    def commit(self, message: str) -> str:
        """Record the staged changes. The message goes through stdin untouched."""
        return self._run_git('commit', '--file', '-', input_text=message).strip()
