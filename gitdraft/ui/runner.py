"""Plumbing shared by the confirmation front-ends."""

import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from gitdraft.errors import ExternalToolError
from gitdraft.git import DiffSummary
from gitdraft.llm import Draft
from gitdraft.output import Style
from gitdraft.ui.state import (
    GenerationChunk,
    GenerationFailed,
    GenerationSucceeded,
    Session,
    SessionState,
    WriteFailed,
    WriteSucceeded,
    render,
    transition,
)

# generate(on_chunk) -> Draft; on_chunk is None when the front-end can't show partial text
GenerateFn = Callable[[Callable[[str], None] | None], Draft]
# write(draft) -> short detail for the success message (URL, commit summary)
WriteFn = Callable[[Draft], str]


@dataclass
class ConfirmationResult:
    session: Session

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def succeeded(self) -> bool:
        return self.session.state is SessionState.SUCCESS

    @property
    def cancelled(self) -> bool:
        return self.session.state is SessionState.CANCELLED

    @property
    def draft(self) -> Draft | None:
        return self.session.draft

    @property
    def error(self) -> str:
        return self.session.error

    @property
    def detail(self) -> str:
        return self.session.detail


class _WorkerCrashed:
    def __init__(self, error: BaseException):
        self.error = error


class Worker:
    """Runs one blocking call on a daemon thread and posts its event to a queue.

    A cancelled run stops listening; the call itself is never interrupted.
    """

    def __init__(self, fn: Callable[[], object], events: queue.Queue):
        self._fn = fn
        self._events = events
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self) -> 'Worker':
        self._thread.start()
        return self

    def _run(self):
        try:
            self._events.put(self._fn())
        except Exception as e:
            self._events.put(_WorkerCrashed(e))


class ConfirmationRunner(ABC):
    """Owns the session and turns collaborator calls into events."""

    def __init__(self, session: Session, generate: GenerateFn, write: WriteFn,
                 summary: DiffSummary, style: Style, commits=(),
                 body_renderer: Callable[[str, Style], str] | None = None,
                 max_files: int | None = None):
        self.session = session
        self.generate = generate
        self.write = write
        self.summary = summary
        self.style = style
        self.commits = tuple(commits)
        self.body_renderer = body_renderer
        self.max_files = max_files
        self.events: queue.Queue = queue.Queue()

    def dispatch(self, event) -> Session:
        if isinstance(event, _WorkerCrashed):
            raise event.error
        self.session = transition(self.session, event)
        return self.session

    def generation_event(self, on_chunk: Callable[[str], None] | None = None):
        try:
            return GenerationSucceeded(self.generate(on_chunk))
        except ExternalToolError as e:
            return GenerationFailed(str(e))

    def write_event(self):
        try:
            return WriteSucceeded(self.write(self.session.draft) or "")
        except ExternalToolError as e:
            return WriteFailed(str(e))

    def start_generation(self, stream: bool = False) -> Worker:
        on_chunk = self._post_chunk if stream else None
        return Worker(lambda: self.generation_event(on_chunk), self.events).start()

    def start_write(self) -> Worker:
        return Worker(self.write_event, self.events).start()

    def _post_chunk(self, text: str) -> None:
        self.events.put(GenerationChunk(text))

    def rendered_body(self, style: Style | None = None) -> str | None:
        draft = self.session.draft
        if draft is None or self.body_renderer is None:
            return None
        return self.body_renderer(draft.body, style or self.style)

    def frame(self, tick: int = 0, style: Style | None = None, with_context: bool = True) -> str:
        style = style or self.style
        return render(
            self.session,
            self.summary if with_context else DiffSummary(),
            style,
            frame=tick,
            commits=self.commits if with_context else (),
            body=self.rendered_body(style),
            max_files=self.max_files,
        )

    @abstractmethod
    def run(self) -> ConfirmationResult:
        pass
