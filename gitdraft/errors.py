"""Error taxonomy shared by every command."""


class GitDraftError(Exception):
    """Base class for errors reported to the user."""
    pass


class InputError(GitDraftError):
    """Nothing to work with: empty diff, empty commit range, nothing staged."""
    pass


class ExternalToolError(GitDraftError):
    """A collaborator (git, gh, GitHub API, AI provider) failed."""
    pass


class UserCancelled(GitDraftError):
    """The user backed out. Not an error; exits quietly with status 0."""
    pass


__all__ = [
    "GitDraftError",
    "InputError",
    "ExternalToolError",
    "UserCancelled",
]
