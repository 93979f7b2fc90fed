"""Markdown to styled terminal text for pull request bodies."""

import re

from gitdraft.output import Style

_HEADING_RE = re.compile(r'^(#{1,6})\s+(.*?)\s*#*\s*$')
_BULLET_RE = re.compile(r'^(\s*)[-*+]\s+(.*)$')
_CHECKBOX_RE = re.compile(r'^\[([ xX])\]\s+(.*)$')
_NUMBERED_RE = re.compile(r'^(\s*)(\d+)[.)]\s+(.*)$')
_FENCE_RE = re.compile(r'^\s*(```|~~~)')
_COMMENT_RE = re.compile(r'<!--.*?-->', re.DOTALL)
_RULE_RE = re.compile(r'^\s*([-*_])(\s*\1){2,}\s*$')

_INLINE_CODE_RE = re.compile(r'`([^`]+)`')
_BOLD_RE = re.compile(r'(\*\*|__)(.+?)\1')
_ITALIC_RE = re.compile(r'(?<![\w*])([*_])(?!\s)(.+?)(?<!\s)\1(?![\w*])')
_LINK_RE = re.compile(r'\[([^\]]+)\]\(([^)]+)\)')


def _inline(text: str, style: Style) -> str:
    # Code spans first so their contents are not styled twice
    spans: list[str] = []

    def _stash(match: re.Match) -> str:
        spans.append(style.info(match.group(1)))
        return f"\x00{len(spans) - 1}\x00"

    text = _INLINE_CODE_RE.sub(_stash, text)
    text = _LINK_RE.sub(lambda m: f"{style.bold(m.group(1))} {style.dim('(' + m.group(2) + ')')}", text)
    text = _BOLD_RE.sub(lambda m: style.bold(m.group(2)), text)
    text = _ITALIC_RE.sub(lambda m: style.italic(m.group(2)), text)
    return re.sub(r'\x00(\d+)\x00', lambda m: spans[int(m.group(1))], text)


def render_markdown(text: str, style: Style) -> str:
    """Render a markdown document for the terminal.

    Only the constructs that show up in PR descriptions are handled:
    headings, bullet and numbered lists, task checkboxes, fenced code,
    horizontal rules and inline emphasis. HTML comments are dropped.
    Anything else passes through unchanged.
    """
    text = _COMMENT_RE.sub('', text)
    out: list[str] = []
    in_fence = False

    for line in text.split('\n'):
        if _FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            out.append(style.dim('    ' + line))
            continue

        heading = _HEADING_RE.match(line)
        if heading:
            level = len(heading.group(1))
            title = _inline(heading.group(2), style)
            if level == 1:
                out.append(style.highlight(title))
            elif level == 2:
                out.append(style.bold(style.info(title)))
            else:
                out.append(style.bold(title))
            continue

        if _RULE_RE.match(line):
            out.append(style.dim(style.rule * 40))
            continue

        bullet = _BULLET_RE.match(line)
        if bullet:
            indent, content = bullet.groups()
            checkbox = _CHECKBOX_RE.match(content)
            if checkbox:
                done = checkbox.group(1).lower() == 'x'
                box = ('☑' if done else '☐') if style.unicode else ('[x]' if done else '[ ]')
                marker = style.success(box) if done else style.dim(box)
                out.append(f"{indent}  {marker} {_inline(checkbox.group(2), style)}")
            else:
                out.append(f"{indent}  {style.dim(style.bullet)} {_inline(content, style)}")
            continue

        numbered = _NUMBERED_RE.match(line)
        if numbered:
            indent, number, content = numbered.groups()
            out.append(f"{indent}  {style.dim(number + '.')} {_inline(content, style)}")
            continue

        out.append(_inline(line, style))

    # Collapse runs of blank lines left behind by removed comments
    rendered = re.sub(r'\n{3,}', '\n\n', '\n'.join(out))
    return rendered.strip('\n')
