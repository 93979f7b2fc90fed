"""GitHub Operations Package"""

from gitdraft.github.gh import (
    GitHubCLI,
    GitHubError,
    RepoInfo,
    PullRequestInfo,
    PullRequestResult,
    extract_first_url,
    normalize_owners,
    pull_number_from_url,
    repo_info_from_remote_url,
)
from gitdraft.github.template import PullRequestTemplate, find_pull_request_template

__all__ = [
    "GitHubCLI",
    "GitHubError",
    "RepoInfo",
    "PullRequestInfo",
    "PullRequestResult",
    "PullRequestTemplate",
    "extract_first_url",
    "normalize_owners",
    "pull_number_from_url",
    "repo_info_from_remote_url",
    "find_pull_request_template",
]
