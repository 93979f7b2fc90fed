"""Diff Summary - per-file added/deleted line counts from unified diff text."""

import re
from dataclasses import dataclass, field

_GIT_HEADER_RE = re.compile(r'^diff --git a/(.+?) b/(.+)$')
_NEW_FILE_RE = re.compile(r'^\+\+\+ (?:b/)?(.+?)(?:\t.*)?$')
_DEV_NULL = '/dev/null'


@dataclass(frozen=True)
class FileChange:
    """Line counts for a single file section of a diff."""
    name: str
    added_lines: int = 0
    deleted_lines: int = 0

    @property
    def total_changes(self) -> int:
        return self.added_lines + self.deleted_lines


@dataclass(frozen=True)
class DiffSummary:
    """Changed files in the order they first appear in the diff."""
    files: tuple[FileChange, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.files)

    def __iter__(self):
        return iter(self.files)

    @property
    def is_empty(self) -> bool:
        return not self.files

    @property
    def total_added(self) -> int:
        return sum(f.added_lines for f in self.files)

    @property
    def total_deleted(self) -> int:
        return sum(f.deleted_lines for f in self.files)


class _Section:
    __slots__ = ('name', 'added', 'deleted', 'from_git_header', 'named')

    def __init__(self, name: str, from_git_header: bool):
        self.name = name
        self.added = 0
        self.deleted = 0
        self.from_git_header = from_git_header
        self.named = not from_git_header

    def freeze(self) -> FileChange:
        return FileChange(name=self.name, added_lines=self.added, deleted_lines=self.deleted)


def _opens_file(current: _Section | None, previous: str) -> bool:
    """Whether a ``+++`` line is a file header rather than added content."""
    if current is None:
        return True
    if current.from_git_header:
        return not current.named
    return previous.startswith('--- ')


def parse_diff_summary(diff: str) -> DiffSummary:
    """Count added and deleted lines per file.

    A ``diff --git`` header opens a section named after its post-rename
    path; a following ``+++`` line may refine that name. Without a git
    header, a ``---``/``+++`` pair opens a section of its own, so added
    content that happens to start with ``++`` stays content. Anything
    before the first header is ignored, and malformed input never raises.
    """
    sections: list[_Section] = []
    current: _Section | None = None
    lines = diff.splitlines()

    for i, line in enumerate(lines):
        header = _GIT_HEADER_RE.match(line)
        if header:
            current = _Section(header.group(2), from_git_header=True)
            sections.append(current)
            continue

        previous = lines[i - 1] if i else ''
        following = lines[i + 1] if i + 1 < len(lines) else ''

        if line.startswith('+++') and _opens_file(current, previous):
            new_file = _NEW_FILE_RE.match(line)
            path = new_file.group(1).strip() if new_file else ''
            if current is not None and current.from_git_header:
                # Deleted files keep the name from the git header
                if path and path != _DEV_NULL:
                    current.name = path
                current.named = True
            elif path and path != _DEV_NULL:
                current = _Section(path, from_git_header=False)
                sections.append(current)
            continue

        if current is None:
            continue
        if line.startswith('---') and following.startswith('+++') and _opens_file(current, line):
            continue

        if line.startswith('+'):
            current.added += 1
        elif line.startswith('-'):
            current.deleted += 1

    return DiffSummary(files=tuple(s.freeze() for s in sections))
