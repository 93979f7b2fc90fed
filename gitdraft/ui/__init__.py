"""Interactive confirmation of generated drafts."""

import sys

from gitdraft.ui.prompt import PromptConfirmation
from gitdraft.ui.runner import ConfirmationResult, ConfirmationRunner
from gitdraft.ui.state import (
    COMMIT_LABELS,
    PR_CREATE_LABELS,
    PR_UPDATE_LABELS,
    Flow,
    Labels,
    Session,
    SessionState,
    new_session,
    parse_commit_lines,
    render,
    transition,
)

CONFIRM_MODES = ("prompt", "tui")


def _has_terminal() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def confirmation_for(mode: str, *args, **kwargs) -> ConfirmationRunner:
    """Front-end for a confirm mode; the curses one needs a real terminal on both ends."""
    if mode == "tui" and _has_terminal():
        from gitdraft.ui.tui import CursesConfirmation
        return CursesConfirmation(*args, **kwargs)
    return PromptConfirmation(*args, **kwargs)


__all__ = [
    "CONFIRM_MODES",
    "COMMIT_LABELS",
    "PR_CREATE_LABELS",
    "PR_UPDATE_LABELS",
    "ConfirmationResult",
    "ConfirmationRunner",
    "Flow",
    "Labels",
    "PromptConfirmation",
    "Session",
    "SessionState",
    "confirmation_for",
    "new_session",
    "parse_commit_lines",
    "render",
    "transition",
]
