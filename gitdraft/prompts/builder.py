"""Prompt Builder - Construct LLM prompts for commit messages and pull requests."""

from dataclasses import dataclass

from gitdraft import COMMIT_TYPES
from gitdraft.git import ProcessedDiff

COMMIT_SYSTEM_PROMPT = """You are a senior software engineer specialized in writing precise, informative git commit messages.

Your standards:
- Every word earns its place: no filler, no fluff
- The diff shows WHAT; you explain WHY
- Specific verbs over vague ones (never "update", "change", "modify")
- Bullets add context the subject line can't capture"""

PR_SYSTEM_PROMPT = """You are an expert software engineer writing GitHub pull request titles and descriptions for reviewers.
You reply with a single JSON object and nothing else."""

# Bullet count thresholds by file count: (min_files, bullet_range)
BULLET_THRESHOLDS_DETAILED = [
    (15, "6-8"),
    (8, "5-6"),
    (4, "4-5"),
    (0, "2-3"),
]

BULLET_THRESHOLDS_DEFAULT = [
    (15, "5-6"),
    (8, "4-5"),
    (4, "3-4"),
    (0, "1-2"),
]

_SUBJECT_SIMPLE = "[subject: imperative verb + what changed]"
_SUBJECT_TYPED = "type(scope): [imperative verb + what changed]"

_BULLETS_SIMPLE = """\
- [bullet: specific detail from the diff]
- [bullet: another detail if needed]"""

_BULLETS_CONVENTIONAL = """\
- [bullet: specific detail from the diff]
- [bullet: why or impact if relevant]"""

_BULLETS_DETAILED = """\
- [bullet: specific implementation detail]
- [bullet: why this approach was chosen]
- [bullet: what problem this solves]"""

# (style, include_body) -> (subject_template, body_template or None)
EXAMPLE_TEMPLATES: dict[tuple[str, bool], tuple[str, str | None]] = {
    ("simple", True): (_SUBJECT_SIMPLE, _BULLETS_SIMPLE),
    ("simple", False): (_SUBJECT_SIMPLE, None),
    ("detailed", True): (_SUBJECT_TYPED, _BULLETS_DETAILED),
    ("detailed", False): (_SUBJECT_TYPED, _BULLETS_DETAILED),  # detailed always has body
    ("conventional", True): (_SUBJECT_TYPED, _BULLETS_CONVENTIONAL),
    ("conventional", False): (_SUBJECT_TYPED, None),
}

NO_TEMPLATE = "NONE"


@dataclass
class PromptConfig:
    """User-provided context that shapes the commit prompt."""
    hint: str | None = None
    forced_type: str | None = None
    language: str = "english"
    style: str = "conventional"
    include_body: bool = True
    max_subject_length: int = 72


@dataclass
class PullRequestInput:
    """Everything the pull request prompt is built from."""
    base_branch: str
    head_branch: str
    commit_log: str
    diff_stat: str
    diff: str
    template: str = ""
    language: str = "english"


class CommitPromptBuilder:
    """Constructs prompts optimized for commit message generation."""

    system_prompt = COMMIT_SYSTEM_PROMPT

    def build(self, diff: ProcessedDiff, config: PromptConfig | None = None) -> str:
        config = config or PromptConfig()
        sections = [
            self._build_role_section(),
            self._build_format_section(config, diff.total_files),
            self._build_examples_section(config),
            self._build_diff_section(diff),
            self._build_hints_section(config),
            self._build_instructions(config),
        ]
        return "\n\n".join(filter(None, sections))

    def _build_role_section(self) -> str:
        return """Analyze the git diff below and write the commit message a careful maintainer would write.

Diff analysis guide:
1. File paths tell you which parts of the codebase are affected
2. +/- lines show what was added or removed; context lines show the surroundings
3. Function, variable and type names reveal intent
4. Identify the PRIMARY purpose: new feature, bug fix, refactoring, etc.
5. If the commit does several things, focus on the most significant one

Scope selection (for type(scope): format):
- Use ONE WORD: module name (auth, api, cli), feature (login, checkout), or component (Button, config)
- NEVER use file paths like 'cli/utils.py' - just use 'cli'"""

    def _build_format_section(self, config: PromptConfig, file_count: int) -> str:
        max_len = config.max_subject_length
        if config.style == "simple":
            format_desc = f"subject line (imperative mood, no trailing period, max {max_len} chars)"
            type_instruction = "Use a simple, direct subject line without type prefixes."
        else:
            format_desc = (f"<type>(<optional scope>): <description> "
                           f"(lowercase description, imperative mood, no trailing period, max {max_len} chars)")
            type_instruction = self._build_type_instruction(config.forced_type)

        if config.include_body or config.style == "detailed":
            body_section = self._build_body_section(config, file_count)
        else:
            body_section = "Do NOT include a body or bullet points. Subject line only."

        return f"""<format>
Write the commit message in {config.language}, in this exact format:

{format_desc}

{body_section}

{type_instruction}
</format>"""

    def _build_type_instruction(self, forced_type: str | None) -> str:
        if forced_type:
            return f"IMPORTANT: Use type '{forced_type}' for this commit."
        types_list = "\n".join(f"  - {t}: {desc}" for t, desc in COMMIT_TYPES.items())
        return f"Choose the most appropriate type:\n{types_list}"

    def _build_body_section(self, config: PromptConfig, file_count: int) -> str:
        thresholds = BULLET_THRESHOLDS_DETAILED if config.style == "detailed" else BULLET_THRESHOLDS_DEFAULT
        bullets = next(r for threshold, r in thresholds if file_count >= threshold)
        return f"""After a blank line, write {bullets} bullet points for this change ({file_count} files).
Each bullet is a complete thought (10-20 words) naming the specific file, component or function."""

    def _build_examples_section(self, config: PromptConfig) -> str:
        key = (config.style, config.include_body)
        subject, bullets = EXAMPLE_TEMPLATES.get(key, EXAMPLE_TEMPLATES[("conventional", True)])
        example = subject + (f"\n\n{bullets}" if bullets else "")
        return f"""<format-examples>
CRITICAL: These show FORMAT only. Never use words from these examples. Analyze the ACTUAL diff below.

{example}
</format-examples>"""

    def _build_diff_section(self, diff: ProcessedDiff) -> str:
        parts = ["<changes>", diff.summary]
        if diff.detailed_diff:
            parts.extend(["", "DIFF DETAILS:", diff.detailed_diff])
        if diff.truncated:
            parts.append("\n[Note: Diff was truncated due to size. Focus on the file summary above for scope.]")
        parts.append("</changes>")
        return "\n".join(parts)

    def _build_hints_section(self, config: PromptConfig) -> str:
        if not config.hint:
            return ""
        return f"""<context>
The developer provided this context about the changes:
"{config.hint}"

Use this to inform your message, but verify it matches what you see in the diff.
</context>"""

    def _build_instructions(self, config: PromptConfig) -> str:
        start = "subject line" if config.style == "simple" else "type(scope): line"
        return f"""<instructions>
Generate exactly ONE commit message.
- Start directly with the {start}
- No markdown formatting (no ```, no bold), no preamble, no explanation afterwards
- Just the raw commit message, ready to use
</instructions>"""


class PullRequestPromptBuilder:
    """Constructs the JSON-returning pull request prompt."""

    system_prompt = PR_SYSTEM_PROMPT

    def build(self, data: PullRequestInput) -> str:
        template = data.template if data.template.strip() else NO_TEMPLATE
        return f"""OUTPUT FORMAT:
- Respond with ONLY a valid JSON object.
- No markdown fences or extra text.
- JSON schema: {{"title":"...", "body":"..."}}

LANGUAGE:
- Write in {data.language}.

TITLE REQUIREMENTS:
- Concise and specific.
- Use imperative mood.
- Keep it under 72 characters if possible.

BODY REQUIREMENTS:
- If PR_TEMPLATE is not "{NO_TEMPLATE}", use it as the base text.
- Preserve headings, lists, checkboxes, and HTML comments from the template.
- Fill each section with relevant information derived from the commits and diff.
- Replace placeholder text with concrete details.
- If testing information is unknown, explicitly say tests were not run.
- If PR_TEMPLATE is "{NO_TEMPLATE}", use sections: Summary, Changes, Testing.

BASE BRANCH: {data.base_branch}
HEAD BRANCH: {data.head_branch}

COMMITS (oldest to newest):
{data.commit_log}

DIFF STAT:
{data.diff_stat}

DIFF:
{data.diff}

PR_TEMPLATE:
{template}
"""
