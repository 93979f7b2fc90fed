"""Diff Processor - Shape a raw diff into a bounded prompt context."""

import re
from dataclasses import dataclass, field
from enum import IntEnum

from gitdraft.git.summary import DiffSummary, FileChange, parse_diff_summary


class Priority(IntEnum):
    """File priority for inclusion in LLM context."""
    SOURCE = 1
    TEST = 2
    CONFIG = 3
    DOCS = 4
    NOISE = 99


PRIORITY_LABELS = {
    Priority.SOURCE: "Source",
    Priority.TEST: "Tests",
    Priority.CONFIG: "Config",
    Priority.DOCS: "Docs",
}


@dataclass
class ProcessedDiff:
    """LLM-ready representation of a diff."""
    summary: str
    detailed_diff: str
    total_files: int = 0
    included_files: int = 0
    filtered_files: int = 0
    truncated: bool = False
    changes: DiffSummary = field(default_factory=DiffSummary)

    @property
    def estimated_tokens(self) -> int:
        """Rough token estimate (~4 chars per token)."""
        return (len(self.summary) + len(self.detailed_diff)) // 4


@dataclass
class ProcessorConfig:
    """Tunable settings for diff processing."""
    max_tokens: int = 6000
    max_lines_per_file: int = 200


class DiffProcessor:
    """Filters lock files and build output, orders files by importance and
    trims the diff to a token budget."""

    NOISE_PATTERNS: list[str] = [
        r'package-lock\.json$', r'yarn\.lock$', r'pnpm-lock\.yaml$',
        r'poetry\.lock$', r'Cargo\.lock$', r'Gemfile\.lock$', r'composer\.lock$',
        r'go\.sum$', r'uv\.lock$',
        r'\.min\.js$', r'\.min\.css$', r'\.map$', r'\.pyc$', r'__pycache__',
        r'\.class$', r'(^|/)dist/', r'(^|/)build/', r'\.egg-info/',
        r'\.idea/', r'\.vscode/', r'\.DS_Store$',
        r'node_modules/', r'(^|/)vendor/', r'(^|/)\.?venv/',
    ]

    TEST_PATTERNS: list[str] = [
        r'(^|/)tests?/', r'(^|/)specs?/', r'__tests__/',
        r'\.test\.', r'\.spec\.', r'_test\.', r'_spec\.',
        r'Tests?\.java$',
    ]

    CONFIG_PATTERNS: list[str] = [
        r'\.json$', r'\.ya?ml$', r'\.toml$', r'\.ini$', r'\.env',
        r'\.config\.', r'(^|/)config/', r'(^|/)settings/',
        r'Makefile$', r'Dockerfile$', r'docker-compose',
    ]

    DOCS_PATTERNS: list[str] = [
        r'\.md$', r'\.rst$', r'\.txt$', r'(^|/)docs/',
        r'README', r'CHANGELOG', r'LICENSE',
    ]

    def __init__(self, config: ProcessorConfig | None = None):
        self.config = config or ProcessorConfig()
        self._rules = [
            (Priority.NOISE, [re.compile(p, re.IGNORECASE) for p in self.NOISE_PATTERNS]),
            (Priority.TEST, [re.compile(p, re.IGNORECASE) for p in self.TEST_PATTERNS]),
            (Priority.DOCS, [re.compile(p, re.IGNORECASE) for p in self.DOCS_PATTERNS]),
            (Priority.CONFIG, [re.compile(p, re.IGNORECASE) for p in self.CONFIG_PATTERNS]),
        ]

    def process(self, diff: str, changes: DiffSummary | None = None) -> ProcessedDiff:
        """Raw diff (and optionally its already-parsed summary) -> prompt context."""
        if changes is None:
            changes = parse_diff_summary(diff)

        ranked = [(f, self.priority(f.name)) for f in changes]
        kept = [(f, p) for f, p in ranked if p != Priority.NOISE]
        noise_count = len(ranked) - len(kept)
        kept.sort(key=lambda item: (item[1], -item[0].total_changes))

        detailed, included, truncated = self._budget_diff(kept, split_diff_by_file(diff))
        return ProcessedDiff(
            summary=self._summary_text(kept, noise_count),
            detailed_diff=detailed,
            total_files=len(changes),
            included_files=included,
            filtered_files=noise_count,
            truncated=truncated,
            changes=changes,
        )

    def priority(self, path: str) -> Priority:
        for priority, patterns in self._rules:
            if any(p.search(path) for p in patterns):
                return priority
        return Priority.SOURCE

    def _summary_text(self, files: list[tuple[FileChange, Priority]], noise_count: int) -> str:
        lines = ["FILES CHANGED:"]
        group = None
        for change, priority in files:
            if priority != group:
                group = priority
                lines.append(f"\n[{PRIORITY_LABELS.get(priority, 'Other')}]")
            lines.append(f"  {change.name} (+{change.added_lines} -{change.deleted_lines})")
        if noise_count:
            lines.append(f"\n[Filtered: {noise_count} files (lock files, generated code)]")
        return "\n".join(lines)

    def _budget_diff(self, files: list[tuple[FileChange, Priority]],
                     sections: dict[str, str]) -> tuple[str, int, bool]:
        parts: list[str] = []
        used = 0
        for change, _ in files:
            section = sections.get(change.name)
            if section is None:
                continue
            section = self._clip_section(section, change.name)
            cost = len(section) // 4
            if used + cost > self.config.max_tokens:
                return "\n".join(parts), len(parts), True
            parts.append(section)
            used += cost
        return "\n".join(parts), len(parts), False

    def _clip_section(self, section: str, path: str) -> str:
        lines = section.split('\n')
        limit = self.config.max_lines_per_file
        if len(lines) <= limit:
            return section
        hidden = len(lines) - limit
        return '\n'.join(lines[:limit] + [f"\n... [{hidden} more lines truncated from {path}]"])


def split_diff_by_file(diff: str) -> dict[str, str]:
    """Raw diff text per file, keyed by post-rename path."""
    sections: dict[str, str] = {}
    name = None
    lines: list[str] = []
    for line in diff.split('\n'):
        if line.startswith('diff --git '):
            if name:
                sections[name] = '\n'.join(lines)
            match = re.match(r'diff --git a/(.+?) b/(.+)$', line)
            name = match.group(2) if match else None
            lines = [line]
        elif name:
            lines.append(line)
    if name:
        sections[name] = '\n'.join(lines)
    return sections
