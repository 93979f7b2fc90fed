"""Confirmation state machine shared by the commit and pull request flows.

Two pure functions drive every front-end:

* ``transition(session, event) -> session``
* ``render(session, summary, style, ...) -> str``

Front-ends only feed events in and draw whatever ``render`` returns.
"""

from dataclasses import dataclass, replace
from enum import Enum

from gitdraft.git import DiffSummary
from gitdraft.llm import Draft
from gitdraft.output import Spinner, Style, colorize_commit_type


class SessionState(Enum):
    LOADING = "loading"
    STREAMING = "streaming"
    CONFIRM = "confirm"
    EDITING = "editing"
    COMMITTING = "committing"
    SUCCESS = "success"
    ERROR = "error"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({SessionState.SUCCESS, SessionState.ERROR, SessionState.CANCELLED})
GENERATING_STATES = frozenset({SessionState.LOADING, SessionState.STREAMING})


class Flow(Enum):
    COMMIT = "commit"
    PULL_REQUEST = "pull_request"


# Key names
APPROVE = "y"
EDIT = "e"
REJECT = "n"
QUIT = "q"
CTRL_C = "ctrl+c"
ENTER = "enter"
ESC = "esc"
BACKSPACE = "backspace"

CANCEL_KEYS = frozenset({QUIT, CTRL_C, ESC})


# -- Events -----------------------------------------------------------------

@dataclass(frozen=True)
class Key:
    name: str


@dataclass(frozen=True)
class EditInput:
    """Replace the edit buffer wholesale (external editor, pasted text)."""
    text: str


@dataclass(frozen=True)
class GenerationChunk:
    text: str


@dataclass(frozen=True)
class GenerationSucceeded:
    draft: Draft


@dataclass(frozen=True)
class GenerationFailed:
    message: str


@dataclass(frozen=True)
class WriteSucceeded:
    detail: str = ""


@dataclass(frozen=True)
class WriteFailed:
    message: str


# -- Session ----------------------------------------------------------------

@dataclass(frozen=True)
class Labels:
    """Flow-specific wording shown by render()."""
    loading: str
    header: str
    confirm_prompt: str
    writing: str
    edit_header: str = "✏️  Edit Commit Message:"
    edit_hint: str = "Press Enter to confirm, Esc to cancel"


COMMIT_LABELS = Labels(
    loading="Generating commit message...",
    header="📝 Generated Commit Message:",
    confirm_prompt="Commit this message? (y)es / (e)dit / (n)o",
    writing="Committing changes...",
)

PR_CREATE_LABELS = Labels(
    loading="Generating pull request message...",
    header="📝 Generated Pull Request:",
    confirm_prompt="Create this pull request? (y)es / (n)o",
    writing="Creating pull request...",
)

PR_UPDATE_LABELS = replace(
    PR_CREATE_LABELS,
    confirm_prompt="Update this pull request? (y)es / (n)o",
    writing="Updating pull request...",
)


@dataclass(frozen=True)
class Session:
    flow: Flow
    labels: Labels
    state: SessionState = SessionState.LOADING
    draft: Draft | None = None
    original_body: str = ""
    edit_buffer: str = ""
    streamed: str = ""
    error: str = ""
    detail: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES


def new_session(flow: Flow, labels: Labels | None = None) -> Session:
    if labels is None:
        labels = COMMIT_LABELS if flow is Flow.COMMIT else PR_CREATE_LABELS
    return Session(flow=flow, labels=labels)


def _is_printable(name: str) -> bool:
    return len(name) == 1 and name.isprintable()


def _edit(session: Session, event) -> Session:
    if isinstance(event, EditInput):
        return replace(session, edit_buffer=event.text)
    if not isinstance(event, Key):
        return session
    if event.name == ENTER:
        body = session.edit_buffer.strip() or session.original_body
        return replace(session, state=SessionState.CONFIRM, draft=session.draft.with_body(body), edit_buffer="")
    if event.name in (ESC, CTRL_C):
        return replace(session, state=SessionState.CONFIRM,
                       draft=session.draft.with_body(session.original_body), edit_buffer="")
    if event.name == BACKSPACE:
        return replace(session, edit_buffer=session.edit_buffer[:-1])
    if _is_printable(event.name):
        return replace(session, edit_buffer=session.edit_buffer + event.name)
    return session


def transition(session: Session, event) -> Session:
    """Next session for an event. Unknown or out-of-place events change nothing."""
    state = session.state
    if state in TERMINAL_STATES:
        return session

    if state in GENERATING_STATES:
        if isinstance(event, GenerationChunk):
            return replace(session, state=SessionState.STREAMING, streamed=session.streamed + event.text)
        if isinstance(event, GenerationSucceeded):
            return replace(session, state=SessionState.CONFIRM, draft=event.draft, streamed="")
        if isinstance(event, GenerationFailed):
            return replace(session, state=SessionState.ERROR, error=event.message)
        if isinstance(event, Key) and event.name in CANCEL_KEYS:
            return replace(session, state=SessionState.CANCELLED)
        return session

    if state is SessionState.CONFIRM:
        if not isinstance(event, Key):
            return session
        name = event.name.lower() if _is_printable(event.name) else event.name
        if name == APPROVE:
            return replace(session, state=SessionState.COMMITTING)
        if name == EDIT and session.flow is Flow.COMMIT:
            return replace(session, state=SessionState.EDITING,
                           original_body=session.draft.body, edit_buffer=session.draft.body)
        if name == REJECT or name in CANCEL_KEYS:
            return replace(session, state=SessionState.CANCELLED)
        return session

    if state is SessionState.EDITING:
        return _edit(session, event)

    if state is SessionState.COMMITTING:
        if isinstance(event, WriteSucceeded):
            return replace(session, state=SessionState.SUCCESS, detail=event.detail)
        if isinstance(event, WriteFailed):
            return replace(session, state=SessionState.ERROR, error=event.message)
        return session

    return session


# -- Rendering --------------------------------------------------------------

def format_diff_summary(summary: DiffSummary, style: Style, max_files: int | None = None) -> str:
    if summary.is_empty:
        return ""
    lines = [style.dim("📄 Changed Files:")]
    files = summary.files if max_files is None else summary.files[:max_files]
    for change in files:
        counts = []
        if change.added_lines:
            counts.append(style.success(f"+{change.added_lines}"))
        if change.deleted_lines:
            counts.append(style.error(f"-{change.deleted_lines}"))
        name = style.highlight(change.name)
        suffix = f" ({', '.join(counts)})" if counts else ""
        lines.append(f" {style.bullet} {name}{suffix}")
    hidden = len(summary.files) - len(files)
    if hidden > 0:
        lines.append(style.dim(f"   ... and {hidden} more files"))
    return "\n".join(lines)


def format_commit_lines(commits: tuple[str, ...] | list[str], style: Style) -> str:
    if not commits:
        return ""
    return "\n".join([style.dim("🧾 Commits:")] + [f" {style.bullet} {line}" for line in commits])


def parse_commit_lines(log: str) -> tuple[str, ...]:
    return tuple(line.strip() for line in log.strip().splitlines() if line.strip())


def format_context(summary: DiffSummary, style: Style, commits=(), max_files: int | None = None) -> str:
    return "\n\n".join(filter(None, [
        format_diff_summary(summary, style, max_files),
        format_commit_lines(commits, style),
    ]))


def format_draft(draft: Draft, style: Style, body: str | None = None) -> str:
    """Title (PR flow) and body; ``body`` overrides the raw body, e.g. rendered markdown."""
    text = draft.body if body is None else body
    if draft.title is None:
        subject, _, rest = text.partition("\n")
        subject = style.bold(colorize_commit_type(subject, style))
        return f"{subject}\n{rest}" if rest else subject
    return f"{style.emphasis(draft.title)}\n\n{text}"


def render(session: Session, summary: DiffSummary, style: Style, frame: int = 0,
           commits=(), body: str | None = None, max_files: int | None = None) -> str:
    """The whole screen for a session, as text. Pure: same inputs, same frame."""
    labels = session.labels
    state = session.state
    context = format_context(summary, style, commits, max_files)
    frames = Spinner.frames_for(style)
    spinner = frames[frame % len(frames)]

    if state in GENERATING_STATES:
        status = f"{style.info(spinner)} {style.info(style.bold(labels.loading))}"
        sections = [context, status]
        if state is SessionState.STREAMING and session.streamed:
            sections.append(style.dim(session.streamed))
        return "\n\n".join(filter(None, sections))

    if state is SessionState.CONFIRM:
        return "\n\n".join(filter(None, [
            context,
            style.info(style.bold(labels.header)),
            format_draft(session.draft, style, body),
            style.prompt(labels.confirm_prompt),
        ]))

    if state is SessionState.EDITING:
        return "\n\n".join(filter(None, [
            context,
            style.info(style.bold(labels.edit_header)),
            f"> {session.edit_buffer}█",
            style.warning(style.bold(labels.edit_hint)),
        ]))

    if state is SessionState.COMMITTING:
        return f"{style.info(spinner)} {style.info(style.bold(labels.writing))}"

    if state is SessionState.ERROR:
        return style.error(style.bold(f"{style.cross} Error: {session.error}"))

    return ""
