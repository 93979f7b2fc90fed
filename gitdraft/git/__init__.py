"""Git Operations Package"""

from gitdraft.git.analyzer import GitAnalyzer, GitError, PushStatus
from gitdraft.git.summary import DiffSummary, FileChange, parse_diff_summary
from gitdraft.git.diff_processor import DiffProcessor, ProcessedDiff, ProcessorConfig, Priority

__all__ = [
    "GitAnalyzer",
    "GitError",
    "PushStatus",
    "DiffSummary",
    "FileChange",
    "parse_diff_summary",
    "DiffProcessor",
    "ProcessedDiff",
    "ProcessorConfig",
    "Priority",
]
