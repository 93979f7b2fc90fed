"""GitHub CLI (gh) wrapper - repository info, PR lookup, PR create/update."""

import json
import re
import subprocess
from dataclasses import dataclass
from urllib.parse import urlparse

from gitdraft.errors import ExternalToolError


class GitHubError(ExternalToolError):
    """Raised when gh or the GitHub API fails."""
    pass


@dataclass
class RepoInfo:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass
class PullRequestInfo:
    number: int
    title: str = ""
    url: str = ""
    state: str = ""
    is_draft: bool = False

    @property
    def state_label(self) -> str:
        return "DRAFT" if self.is_draft else self.state


@dataclass
class PullRequestResult:
    """What gh reported after a create or update."""
    url: str = ""
    number: str = ""
    stdout: str = ""
    stderr: str = ""


_URL_RE = re.compile(r'https?://\S+')
_PR_LIST_FIELDS = "number,title,url,state,isDraft,headRefName,headRepositoryOwner"


def extract_first_url(output: str) -> str:
    match = _URL_RE.search(output)
    return match.group(0) if match else ""


def pull_number_from_url(pr_url: str) -> str:
    """`https://github.com/o/r/pull/42` -> "42"; "" when there is no number."""
    try:
        path = urlparse(pr_url).path
    except ValueError:
        return ""
    segments = path.strip('/').split('/')
    for i in range(len(segments) - 1):
        if segments[i] in ('pull', 'pulls') and segments[i + 1].isdigit():
            return segments[i + 1]
    return ""


def _repo_info_from_path(path: str) -> RepoInfo | None:
    path = path.lstrip('/')
    if path.endswith('.git'):
        path = path[:-len('.git')]
    parts = path.split('/')
    if len(parts) < 2:
        return None
    owner, name = parts[0].strip(), parts[1].strip()
    if not owner or not name:
        return None
    return RepoInfo(owner=owner, name=name)


def repo_info_from_remote_url(remote_url: str) -> RepoInfo | None:
    """Owner/name from an https or scp-style (git@host:owner/repo.git) remote."""
    remote_url = remote_url.strip()
    if not remote_url:
        return None
    if '://' in remote_url:
        try:
            return _repo_info_from_path(urlparse(remote_url).path)
        except ValueError:
            return None
    if ':' in remote_url:
        return _repo_info_from_path(remote_url.split(':', 1)[1])
    return None


def normalize_owners(owners: list[str]) -> list[str]:
    """Lower-cased, de-duplicated, order kept."""
    seen: list[str] = []
    for owner in owners:
        owner = (owner or "").strip().lower()
        if owner and owner not in seen:
            seen.append(owner)
    return seen


class GitHubCLI:
    """Runs gh for everything that talks to GitHub."""

    def __init__(self, cwd: str | None = None):
        self.cwd = cwd

    def _run(self, args: list[str], input_text: str | None = None) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                ['gh', *args],
                capture_output=True,
                text=True,
                input=input_text,
                cwd=self.cwd,
                encoding='utf-8',
                errors='replace'
            )
        except FileNotFoundError:
            raise GitHubError("GitHub CLI (gh) is not installed or not in PATH")

    def _run_gh(self, *args: str, action: str) -> str:
        result = self._run(list(args))
        if result.returncode != 0:
            detail = result.stderr.strip()
            raise GitHubError(f"Failed to {action}" + (f": {detail}" if detail else ""))
        return result.stdout

    def _run_json(self, *args: str, action: str):
        output = self._run_gh(*args, action=action)
        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            raise GitHubError(f"Failed to parse {action} output: {e}")

    def auth_token(self) -> str:
        token = self._run_gh('auth', 'token', action="get GitHub auth token").strip()
        if not token:
            raise GitHubError("gh auth token returned empty output")
        return token

    def repo_info(self) -> tuple[RepoInfo, RepoInfo | None]:
        """Current repository and, for forks, its parent."""
        data = self._run_json('repo', 'view', '--json', 'owner,name,parent', action="get repository info")
        owner = ((data.get('owner') or {}).get('login') or "").strip()
        name = (data.get('name') or "").strip()
        if not owner or not name:
            raise GitHubError("Repository info is incomplete")

        current = RepoInfo(owner=owner, name=name)
        parent_data = data.get('parent') or {}
        parent_owner = ((parent_data.get('owner') or {}).get('login') or "").strip()
        parent_name = (parent_data.get('name') or "").strip()
        if parent_owner and parent_name:
            return current, RepoInfo(owner=parent_owner, name=parent_name)
        return current, None

    def _list_by_head(self, repo_full_name: str, head: str, limit: int) -> list[dict]:
        args = ['pr', 'list', '--state', 'all', '--json', _PR_LIST_FIELDS,
                '--limit', str(limit), '--head', head]
        if repo_full_name.strip():
            args += ['--repo', repo_full_name]
        prs = self._run_json(*args, action="list pull requests")
        return prs if isinstance(prs, list) else []

    @staticmethod
    def _select_match(prs: list[dict], head_branch: str, owner: str,
                      owners: list[str]) -> PullRequestInfo | None:
        for pr in prs:
            if (pr.get('headRefName') or "").strip() != head_branch:
                continue
            login = ((pr.get('headRepositoryOwner') or {}).get('login') or "").strip().lower()
            if owner and login != owner:
                continue
            if not owner and owners and login and login not in owners:
                continue
            return PullRequestInfo(
                number=int(pr.get('number') or 0),
                title=pr.get('title') or "",
                url=pr.get('url') or "",
                state=pr.get('state') or "",
                is_draft=bool(pr.get('isDraft')),
            )
        return None

    def find_pull_request(self, repo_full_name: str, head_branch: str,
                          head_owners: list[str]) -> PullRequestInfo | None:
        """Existing PR (any state) whose head is this branch in one of the owners' repos."""
        head_branch = head_branch.strip()
        if not head_branch:
            raise GitHubError("Head branch is empty")

        owners = normalize_owners(head_owners)
        for owner in owners:
            prs = self._list_by_head(repo_full_name, f"{owner}:{head_branch}", 5)
            match = self._select_match(prs, head_branch, owner, owners)
            if match:
                return match

        prs = self._list_by_head(repo_full_name, head_branch, 20)
        return self._select_match(prs, head_branch, "", owners)

    def _write_pull_request(self, args: list[str], body: str, action: str) -> PullRequestResult:
        result = self._run(args, input_text=body)
        if result.returncode != 0:
            detail = '\n'.join(p.strip() for p in (result.stdout, result.stderr) if p.strip())
            raise GitHubError(f"Failed to {action}" + (f"\n{detail}" if detail else ""))

        combined = '\n'.join(p.strip() for p in (result.stdout, result.stderr) if p.strip())
        url = extract_first_url(combined)
        return PullRequestResult(
            url=url,
            number=pull_number_from_url(url) if url else "",
            stdout=result.stdout,
            stderr=result.stderr,
        )

    def create_pull_request(self, title: str, body: str, base: str, draft: bool = False) -> PullRequestResult:
        args = ['pr', 'create', '--title', title, '--body-file', '-', '--base', base]
        if draft:
            args.append('--draft')
        return self._write_pull_request(args, body, "create pull request")

    def update_pull_request(self, number: int, title: str, body: str) -> PullRequestResult:
        args = ['pr', 'edit', str(number), '--title', title, '--body-file', '-']
        return self._write_pull_request(args, body, "update pull request")
