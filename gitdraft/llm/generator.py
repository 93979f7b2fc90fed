"""Draft Generator - prompts in, validated Drafts out."""

import json
import re
from typing import Callable

from gitdraft import COMMIT_TYPE_NAMES
from gitdraft.git import ProcessedDiff
from gitdraft.llm.base import Draft, LLMClient, LLMError
from gitdraft.prompts import CommitPromptBuilder, PromptConfig, PullRequestInput, PullRequestPromptBuilder

TYPES_PATTERN = '|'.join(COMMIT_TYPE_NAMES)

COMMIT_TEMPERATURE = 0.3
PR_TEMPERATURE = 0.2

_JUNK_RE = re.compile(r'^(diff --git |@@\s|[+-]{3}\s[ab]/|index [0-9a-f]|```)')
_JSON_FENCE_RE = re.compile(r'^```(?:json)?\s*\n?(.*?)\n?```$', re.DOTALL)


def clean_commit_message(text: str) -> str:
    """Clean up LLM response to extract just the commit message."""
    lines = text.strip().split('\n')
    start_idx = 0
    for i, line in enumerate(lines):
        if re.match(rf'^[`\s]*({TYPES_PATTERN})[\(!:]', line):
            start_idx = i
            break
    else:
        # No typed subject: skip fence-only lines at the top
        while start_idx < len(lines) - 1 and lines[start_idx].strip() in ('', '```'):
            start_idx += 1

    # Cut off echoed diff output, code blocks, etc.
    end_idx = len(lines)
    for i in range(start_idx + 1, len(lines)):
        if _JUNK_RE.match(lines[i]):
            end_idx = i
            break

    cleaned = '\n'.join(lines[start_idx:end_idx]).rstrip()
    lines = cleaned.split('\n')
    lines[0] = lines[0].strip('`').strip()
    return '\n'.join(lines)


def parse_pull_request_content(text: str) -> Draft:
    """`{"title": ..., "body": ...}` (optionally fenced) -> Draft."""
    text = text.strip()
    fenced = _JSON_FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1).strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LLMError(f"Failed to parse JSON response: {e}")
    if not isinstance(data, dict):
        raise LLMError("Failed to parse JSON response: expected an object")

    title = str(data.get("title") or "").strip()
    body = str(data.get("body") or "").strip()
    if not title:
        raise LLMError("Generated PR title is empty")
    if not body:
        raise LLMError("Generated PR body is empty")
    return Draft(title=title, body=body)


class DraftGenerator:
    """Turns change context into Drafts through one LLM call each. No retries."""

    def __init__(self, client: LLMClient):
        self.client = client
        self.last_prompt = ""
        self.last_tokens = 0
        self._commit_builder = CommitPromptBuilder()
        self._pr_builder = PullRequestPromptBuilder()

    @property
    def name(self) -> str:
        return self.client.name

    def _complete(self, prompt: str, system: str, temperature: float,
                  on_chunk: Callable[[str], None] | None) -> str:
        self.last_prompt = prompt
        self.last_tokens = 0
        if on_chunk is None:
            response = self.client.generate(prompt, system=system, temperature=temperature)
            self.last_tokens = response.tokens_used
            return response.content
        pieces = []
        for piece in self.client.stream(prompt, system=system, temperature=temperature):
            pieces.append(piece)
            on_chunk(piece)
        return ''.join(pieces)

    def generate_commit_message(self, diff: ProcessedDiff, config: PromptConfig | None = None,
                                on_chunk: Callable[[str], None] | None = None) -> Draft:
        prompt = self._commit_builder.build(diff, config)
        raw = self._complete(prompt, self._commit_builder.system_prompt, COMMIT_TEMPERATURE, on_chunk)
        message = clean_commit_message(raw)
        if not message.strip():
            raise LLMError("Generated commit message is empty")
        return Draft(body=message)

    def generate_pull_request(self, data: PullRequestInput,
                              on_chunk: Callable[[str], None] | None = None) -> Draft:
        prompt = self._pr_builder.build(data)
        raw = self._complete(prompt, self._pr_builder.system_prompt, PR_TEMPERATURE, on_chunk)
        if not raw.strip():
            raise LLMError("Empty response from model")
        return parse_pull_request_content(raw)
