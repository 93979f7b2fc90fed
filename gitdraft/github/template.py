"""Pull request template lookup: the repository first, then the owner's `.github` repo."""

import base64
import binascii
import json
import os
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

from gitdraft.github.gh import GitHubError

TEMPLATE_FILE_CANDIDATES = [
    ".github/PULL_REQUEST_TEMPLATE.md",
    ".github/pull_request_template.md",
    "PULL_REQUEST_TEMPLATE.md",
    "pull_request_template.md",
    "docs/PULL_REQUEST_TEMPLATE.md",
    "docs/pull_request_template.md",
]

TEMPLATE_DIR_CANDIDATES = [
    ".github/PULL_REQUEST_TEMPLATE",
    ".github/pull_request_template",
    "PULL_REQUEST_TEMPLATE",
    "pull_request_template",
    "docs/PULL_REQUEST_TEMPLATE",
    "docs/pull_request_template",
]

TEMPLATE_EXTENSIONS = ('.md', '.markdown', '.txt')
GITHUB_API = "https://api.github.com"
ORG_TEMPLATE_REPO = ".github"


@dataclass
class PullRequestTemplate:
    source: str  # "repo" or "org"
    path: str
    content: str


def is_template_file(name: str) -> bool:
    return name.lower().endswith(TEMPLATE_EXTENSIONS)


def find_local_template(repo_root: str) -> PullRequestTemplate | None:
    root = Path(repo_root)
    for rel_path in TEMPLATE_FILE_CANDIDATES:
        path = root / rel_path
        if not path.is_file():
            continue
        try:
            content = path.read_text(encoding='utf-8')
        except OSError as e:
            raise GitHubError(f"Failed to read template file {rel_path}: {e}")
        return PullRequestTemplate(source="repo", path=rel_path, content=content)

    for rel_dir in TEMPLATE_DIR_CANDIDATES:
        directory = root / rel_dir
        if not directory.is_dir():
            continue
        try:
            names = sorted(p.name for p in directory.iterdir() if p.is_file() and is_template_file(p.name))
            if not names:
                continue
            content = (directory / names[0]).read_text(encoding='utf-8')
        except OSError as e:
            raise GitHubError(f"Failed to read template directory {rel_dir}: {e}")
        return PullRequestTemplate(source="repo", path=f"{rel_dir}/{names[0]}", content=content)

    return None


class ContentsClient:
    """Minimal GitHub REST contents API client."""

    TIMEOUT = 15

    def __init__(self, token: str, api_url: str = GITHUB_API):
        self.token = token
        self.api_url = api_url.rstrip('/')

    def _get(self, owner: str, repo: str, path: str):
        """Decoded JSON for a contents path, or None on 404."""
        url = f"{self.api_url}/repos/{quote(owner)}/{quote(repo)}/contents/{quote(path)}"
        req = urllib.request.Request(url, headers={
            "Accept": "application/vnd.github+json",
            "User-Agent": "gitdraft",
            "Authorization": f"token {self.token}",
        })
        try:
            with urllib.request.urlopen(req, timeout=self.TIMEOUT) as response:
                body = response.read().decode('utf-8')
        except urllib.error.HTTPError as e:
            if e.code == 404:
                return None
            raise GitHubError(f"Unexpected status {e.code} when fetching {path}")
        except urllib.error.URLError as e:
            raise GitHubError(f"GitHub API request failed for {path}: {e.reason}")
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise GitHubError(f"Failed to parse GitHub response for {path}: {e}")

    def fetch_file(self, owner: str, repo: str, path: str) -> str | None:
        data = self._get(owner, repo, path)
        if not isinstance(data, dict) or data.get('type') != 'file':
            return None
        content = data.get('content') or ""
        if data.get('encoding') == 'base64':
            try:
                content = base64.b64decode(content.replace('\n', '')).decode('utf-8')
            except (binascii.Error, UnicodeDecodeError) as e:
                raise GitHubError(f"Failed to decode base64 content for {path}: {e}")
        return content

    def list_dir(self, owner: str, repo: str, path: str) -> list[dict] | None:
        data = self._get(owner, repo, path)
        if data is None:
            return None
        if not isinstance(data, list):
            return []
        return data


def find_org_template(client: ContentsClient, owner: str) -> PullRequestTemplate | None:
    for rel_path in TEMPLATE_FILE_CANDIDATES:
        content = client.fetch_file(owner, ORG_TEMPLATE_REPO, rel_path)
        if content is not None:
            return PullRequestTemplate(source="org", path=rel_path, content=content)

    for rel_dir in TEMPLATE_DIR_CANDIDATES:
        entries = client.list_dir(owner, ORG_TEMPLATE_REPO, rel_dir)
        if not entries:
            continue
        paths = sorted(
            e.get('path') or f"{rel_dir}/{e.get('name')}"
            for e in entries
            if e.get('type') == 'file' and is_template_file(e.get('name') or "")
        )
        if not paths:
            continue
        content = client.fetch_file(owner, ORG_TEMPLATE_REPO, paths[0])
        if content is not None:
            return PullRequestTemplate(source="org", path=paths[0], content=content)

    return None


def find_pull_request_template(repo_root: str, token: str = "", owner: str = "",
                               client: ContentsClient | None = None) -> PullRequestTemplate | None:
    """Repository template if there is one, else the owner's organization default."""
    local = find_local_template(repo_root)
    if local is not None:
        return local
    if not owner or not (token or client):
        return None
    api_url = os.environ.get("GITHUB_API_URL", GITHUB_API)
    return find_org_template(client or ContentsClient(token, api_url), owner)
