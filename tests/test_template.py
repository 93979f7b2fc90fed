"""
Tests for pull request template lookup.

Run with:
    pytest tests/test_template.py -v
"""

import base64
import io
import json
import urllib.error

import pytest

from gitdraft.github import GitHubError, PullRequestTemplate, find_pull_request_template
from gitdraft.github.template import ContentsClient, find_local_template, find_org_template


class FakeContents:
    """In-memory stand-in for the contents API: files by path, dirs by path."""

    def __init__(self, files=None, dirs=None):
        self.files = files or {}
        self.dirs = dirs or {}
        self.requests: list[tuple[str, str, str]] = []

    def fetch_file(self, owner, repo, path):
        self.requests.append((owner, repo, path))
        return self.files.get(path)

    def list_dir(self, owner, repo, path):
        self.requests.append((owner, repo, path))
        return self.dirs.get(path)


class TestLocalTemplate:

    def test_none_found(self, tmp_path):
        assert find_local_template(str(tmp_path)) is None

    def test_github_dir_file(self, tmp_path):
        (tmp_path / ".github").mkdir()
        (tmp_path / ".github" / "pull_request_template.md").write_text("## What\n", encoding="utf-8")

        template = find_local_template(str(tmp_path))
        assert template == PullRequestTemplate("repo", ".github/pull_request_template.md", "## What\n")

    def test_file_beats_directory(self, tmp_path):
        (tmp_path / "docs" / "PULL_REQUEST_TEMPLATE").mkdir(parents=True)
        (tmp_path / "docs" / "PULL_REQUEST_TEMPLATE" / "a.md").write_text("dir", encoding="utf-8")
        (tmp_path / "PULL_REQUEST_TEMPLATE.md").write_text("root", encoding="utf-8")

        assert find_local_template(str(tmp_path)).content == "root"

    def test_directory_picks_first_template_by_name(self, tmp_path):
        directory = tmp_path / ".github" / "PULL_REQUEST_TEMPLATE"
        directory.mkdir(parents=True)
        (directory / "zeta.md").write_text("zeta", encoding="utf-8")
        (directory / "alpha.markdown").write_text("alpha", encoding="utf-8")
        (directory / "README.rst").write_text("ignored", encoding="utf-8")

        template = find_local_template(str(tmp_path))
        assert template.path == ".github/PULL_REQUEST_TEMPLATE/alpha.markdown"
        assert template.content == "alpha"

    def test_directory_without_templates_is_skipped(self, tmp_path):
        (tmp_path / ".github" / "PULL_REQUEST_TEMPLATE").mkdir(parents=True)
        (tmp_path / ".github" / "PULL_REQUEST_TEMPLATE" / "notes.rst").write_text("x", encoding="utf-8")
        assert find_local_template(str(tmp_path)) is None


class TestOrgTemplate:

    def test_file_candidate(self):
        client = FakeContents(files={"docs/pull_request_template.md": "org body"})
        template = find_org_template(client, "acme")

        assert template == PullRequestTemplate("org", "docs/pull_request_template.md", "org body")
        assert all(owner == "acme" and repo == ".github" for owner, repo, _ in client.requests)

    def test_directory_candidate(self):
        client = FakeContents(
            dirs={".github/PULL_REQUEST_TEMPLATE": [
                {"type": "file", "name": "b.md", "path": ".github/PULL_REQUEST_TEMPLATE/b.md"},
                {"type": "file", "name": "a.txt", "path": ".github/PULL_REQUEST_TEMPLATE/a.txt"},
                {"type": "dir", "name": "nested", "path": ".github/PULL_REQUEST_TEMPLATE/nested"},
            ]},
            files={".github/PULL_REQUEST_TEMPLATE/a.txt": "from a"},
        )
        template = find_org_template(client, "acme")
        assert template.path == ".github/PULL_REQUEST_TEMPLATE/a.txt"
        assert template.content == "from a"

    def test_nothing_found(self):
        assert find_org_template(FakeContents(), "acme") is None


class TestFindPullRequestTemplate:

    def test_local_wins(self, tmp_path):
        (tmp_path / "pull_request_template.md").write_text("local", encoding="utf-8")
        client = FakeContents(files={".github/PULL_REQUEST_TEMPLATE.md": "org"})

        template = find_pull_request_template(str(tmp_path), owner="acme", client=client)
        assert template.source == "repo"
        assert client.requests == []

    def test_falls_back_to_org(self, tmp_path):
        client = FakeContents(files={".github/PULL_REQUEST_TEMPLATE.md": "org"})
        template = find_pull_request_template(str(tmp_path), owner="acme", client=client)
        assert template.source == "org"

    def test_no_token_no_org_lookup(self, tmp_path):
        assert find_pull_request_template(str(tmp_path), token="", owner="acme") is None


class FakeHTTPResponse(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class TestContentsClient:

    @pytest.fixture
    def client(self):
        return ContentsClient("t0ken", api_url="https://api.example.com/")

    def test_fetch_base64_file(self, client, monkeypatch):
        seen = []
        payload = {"type": "file", "encoding": "base64",
                   "content": base64.b64encode("## Template\n".encode()).decode() + "\n"}

        def fake_urlopen(req, timeout=None):
            seen.append(req)
            return FakeHTTPResponse(json.dumps(payload).encode())

        monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)
        assert client.fetch_file("acme", ".github", "docs/x.md") == "## Template\n"
        assert seen[0].full_url == "https://api.example.com/repos/acme/.github/contents/docs/x.md"
        assert seen[0].get_header("Authorization") == "token t0ken"

    def test_fetch_directory_is_not_a_file(self, client, monkeypatch):
        monkeypatch.setattr("urllib.request.urlopen",
                            lambda req, timeout=None: FakeHTTPResponse(b'[{"type": "file"}]'))
        assert client.fetch_file("acme", ".github", "docs") is None

    def test_missing_path(self, client, monkeypatch):
        def not_found(req, timeout=None):
            raise urllib.error.HTTPError(req.full_url, 404, "Not Found", {}, None)

        monkeypatch.setattr("urllib.request.urlopen", not_found)
        assert client.fetch_file("acme", ".github", "x.md") is None
        assert client.list_dir("acme", ".github", "dir") is None

    def test_server_error(self, client, monkeypatch):
        def broken(req, timeout=None):
            raise urllib.error.HTTPError(req.full_url, 500, "Server Error", {}, None)

        monkeypatch.setattr("urllib.request.urlopen", broken)
        with pytest.raises(GitHubError, match="Unexpected status 500"):
            client.fetch_file("acme", ".github", "x.md")

    def test_bad_base64(self, client, monkeypatch):
        payload = {"type": "file", "encoding": "base64", "content": "!!!not base64"}
        monkeypatch.setattr("urllib.request.urlopen",
                            lambda req, timeout=None: FakeHTTPResponse(json.dumps(payload).encode()))
        with pytest.raises(GitHubError, match="decode"):
            client.fetch_file("acme", ".github", "x.md")
