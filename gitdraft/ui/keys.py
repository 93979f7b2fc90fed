"""Single-keystroke input for the prompt front-end."""

import os
import sys
from typing import TextIO

from gitdraft.output import Style
from gitdraft.ui.state import BACKSPACE, CTRL_C, ENTER, ESC

_CONTROL_KEYS = {
    '\r': ENTER,
    '\n': ENTER,
    '\x1b': ESC,
    '\x03': CTRL_C,
    '\x04': CTRL_C,
    '\x7f': BACKSPACE,
    '\x08': BACKSPACE,
}


def key_name(char: str) -> str:
    """Raw character -> the key name the state machine understands."""
    return _CONTROL_KEYS.get(char, char)


def _read_raw_posix(stream: TextIO) -> str:
    import termios
    import tty

    fd = stream.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        return os.read(fd, 1).decode('utf-8', errors='replace')
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)


def _read_raw_windows() -> str:
    import msvcrt
    return msvcrt.getwch()


def read_key(stream: TextIO | None = None) -> str:
    """Read one keypress without waiting for Enter.

    When stdin is not a terminal, a whole line is read and its first
    character stands in for the key; an empty line is Enter and end of
    input is Ctrl+C.
    """
    stream = stream or sys.stdin
    if hasattr(stream, 'isatty') and stream.isatty():
        if sys.platform == 'win32':
            return key_name(_read_raw_windows())
        return key_name(_read_raw_posix(stream))

    line = stream.readline()
    if not line:
        return CTRL_C
    line = line.strip()
    return line[0] if line else ENTER


def prompt_yes_no(prompt: str, style: Style, out: TextIO | None = None,
                  stream: TextIO | None = None) -> bool:
    """Ask a (y)es / (n)o question; anything that is not y/n is ignored.

    Ctrl+C, Esc and end of input count as "no".
    """
    out = out or sys.stderr
    print(f"{style.prompt(prompt)} ", end='', flush=True, file=out)
    while True:
        key = read_key(stream)
        if key.lower() == 'y':
            print(file=out)
            return True
        if key.lower() == 'n' or key in (CTRL_C, ESC):
            print(file=out)
            return False
