"""Line-oriented confirmation: spinner, printed draft, single keystroke answer."""

import queue
import sys
from typing import Callable, TextIO

from gitdraft.output import Spinner
from gitdraft.ui.editor import edit_message
from gitdraft.ui.keys import read_key
from gitdraft.ui.runner import ConfirmationResult, ConfirmationRunner
from gitdraft.ui.state import (
    CTRL_C,
    ENTER,
    ESC,
    EditInput,
    Key,
    SessionState,
    format_context,
)


class PromptConfirmation(ConfirmationRunner):
    """Drives the session from a plain terminal.

    Everything is written to ``out`` (stderr by default) so stdout stays
    free for piping. Editing hands the body to the user's $EDITOR.
    """

    POLL_INTERVAL = 0.1

    def __init__(self, *args, out: TextIO | None = None, stream: TextIO | None = None,
                 editor: Callable[[str], str | None] = edit_message, **kwargs):
        super().__init__(*args, **kwargs)
        self.out = out or sys.stderr
        self.stream = stream
        self.editor = editor

    def run(self) -> ConfirmationResult:
        context = format_context(self.summary, self.style, self.commits, self.max_files)
        if context:
            print(context, file=self.out)
            print(file=self.out)

        self.start_generation()
        self._wait(self.session.labels.loading)

        while not self.session.is_terminal:
            state = self.session.state
            if state is SessionState.CONFIRM:
                self._confirm()
            elif state is SessionState.EDITING:
                self._edit()
            elif state is SessionState.COMMITTING:
                self.start_write()
                self._wait(self.session.labels.writing)
            else:
                self._wait(self.session.labels.loading)

        return ConfirmationResult(self.session)

    def _wait(self, label: str) -> None:
        """Block until a worker event moves the session out of its current state."""
        state = self.session.state
        with Spinner(label, self.style, stream=self.out):
            while self.session.state is state:
                try:
                    event = self.events.get(timeout=self.POLL_INTERVAL)
                except queue.Empty:
                    continue
                except KeyboardInterrupt:
                    # Ignored while writing; cancels while generating
                    self.dispatch(Key(CTRL_C))
                    continue
                self.dispatch(event)

    def _confirm(self) -> None:
        print(self.frame(with_context=False), end=' ', flush=True, file=self.out)
        while self.session.state is SessionState.CONFIRM:
            try:
                key = read_key(self.stream)
            except KeyboardInterrupt:
                key = CTRL_C
            self.dispatch(Key(key))
        print(file=self.out)

    def _edit(self) -> None:
        edited = self.editor(self.session.draft.body)
        if edited is None:
            self.dispatch(Key(ESC))
            return
        self.dispatch(EditInput(edited))
        self.dispatch(Key(ENTER))
