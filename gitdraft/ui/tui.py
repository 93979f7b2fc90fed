"""Full-screen curses confirmation with streamed generation and inline editing."""

import curses
import queue

from gitdraft.output import Style
from gitdraft.ui.keys import key_name
from gitdraft.ui.runner import ConfirmationResult, ConfirmationRunner
from gitdraft.ui.state import (
    BACKSPACE,
    ENTER,
    GENERATING_STATES,
    Key,
    SessionState,
)

_CURSES_KEYS = {
    curses.KEY_ENTER: ENTER,
    curses.KEY_BACKSPACE: BACKSPACE,
}


def _draw(screen, text: str, tail: bool = False) -> None:
    screen.erase()
    height, width = screen.getmaxyx()
    lines = text.splitlines()
    # While streaming the newest text is the interesting part
    lines = lines[-height:] if tail else lines[:height]
    for i, line in enumerate(lines):
        try:
            screen.addnstr(i, 0, line, max(width - 1, 0))
        except curses.error:
            # Writing into the last cell of the window raises; the text is already there
            pass
    screen.refresh()


class CursesConfirmation(ConfirmationRunner):
    """Redraws the whole session every tick; keys and worker events feed transition()."""

    TICK_MS = 80

    def run(self) -> ConfirmationResult:
        return curses.wrapper(self._main)

    def _main(self, screen) -> ConfirmationResult:
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        curses.raw()
        curses.set_escdelay(25)
        screen.keypad(True)
        screen.timeout(self.TICK_MS)

        style = Style(color=False, unicode=self.style.unicode)
        self.start_generation(stream=True)
        writing = False
        tick = 0

        while not self.session.is_terminal:
            self._drain()
            if self.session.is_terminal:
                break
            if self.session.state is SessionState.COMMITTING and not writing:
                writing = True
                self.start_write()

            _draw(screen, self.frame(tick, style), tail=self.session.state in GENERATING_STATES)
            key = self._read_key(screen)
            if key is not None:
                self.dispatch(Key(key))
            tick += 1

        return ConfirmationResult(self.session)

    def _drain(self) -> None:
        while True:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                return
            self.dispatch(event)

    @staticmethod
    def _read_key(screen) -> str | None:
        try:
            ch = screen.get_wch()
        except curses.error:
            return None
        if isinstance(ch, int):
            return _CURSES_KEYS.get(ch)
        return key_name(ch)
