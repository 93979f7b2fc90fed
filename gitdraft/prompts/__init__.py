"""Prompt Construction Package"""

from gitdraft.prompts.builder import (
    CommitPromptBuilder,
    PromptConfig,
    PullRequestInput,
    PullRequestPromptBuilder,
    COMMIT_SYSTEM_PROMPT,
    PR_SYSTEM_PROMPT,
)

__all__ = [
    "CommitPromptBuilder",
    "PromptConfig",
    "PullRequestInput",
    "PullRequestPromptBuilder",
    "COMMIT_SYSTEM_PROMPT",
    "PR_SYSTEM_PROMPT",
]
