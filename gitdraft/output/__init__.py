"""Terminal Output Formatting Package"""

import os
import re
import sys
import threading
from dataclasses import dataclass
from typing import TextIO


class Colors:
    """ANSI escape codes for terminal colors."""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    ITALIC = '\033[3m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'


COLOR_MODES = ("auto", "always", "never")


def _supports_color(stream: TextIO) -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    if not hasattr(stream, 'isatty') or not stream.isatty():
        return False
    if sys.platform == 'win32':
        try:
            import ctypes
            kernel32 = ctypes.windll.kernel32
            kernel32.SetConsoleMode(kernel32.GetStdHandle(-11), 7)
            return True
        except Exception:
            return False
    return True


def _supports_unicode(stream: TextIO) -> bool:
    if sys.platform == 'win32':
        try:
            '✓'.encode(getattr(stream, 'encoding', None) or 'utf-8')
            return True
        except (UnicodeEncodeError, LookupError):
            return False
    return True


@dataclass(frozen=True)
class Style:
    """Styling choices for one run. Passed explicitly to everything that draws."""
    color: bool = True
    unicode: bool = True

    @classmethod
    def detect(cls, color_mode: str = "auto", stream: TextIO | None = None) -> 'Style':
        stream = stream or sys.stdout
        if color_mode == "always":
            color = True
        elif color_mode == "never":
            color = False
        else:
            color = _supports_color(stream)
        return cls(color=color, unicode=_supports_unicode(stream))

    @classmethod
    def plain(cls) -> 'Style':
        return cls(color=False, unicode=True)

    def _colorize(self, text: str, *codes: str) -> str:
        if not self.color:
            return text
        return f"{''.join(codes)}{text}{Colors.RESET}"

    def success(self, text: str) -> str:
        return self._colorize(text, Colors.GREEN)

    def error(self, text: str) -> str:
        return self._colorize(text, Colors.RED)

    def warning(self, text: str) -> str:
        return self._colorize(text, Colors.YELLOW)

    def info(self, text: str) -> str:
        return self._colorize(text, Colors.CYAN)

    def prompt(self, text: str) -> str:
        return self._colorize(text, Colors.BOLD, Colors.BLUE)

    def dim(self, text: str) -> str:
        return self._colorize(text, Colors.DIM)

    def bold(self, text: str) -> str:
        return self._colorize(text, Colors.BOLD)

    def italic(self, text: str) -> str:
        return self._colorize(text, Colors.ITALIC)

    def emphasis(self, text: str) -> str:
        """Bold italic, used for generated titles and messages."""
        return self._colorize(text, Colors.BOLD, Colors.ITALIC)

    def highlight(self, text: str) -> str:
        return self._colorize(text, Colors.BOLD, Colors.MAGENTA)

    @property
    def check(self) -> str:
        return '✓' if self.unicode else '[OK]'

    @property
    def cross(self) -> str:
        return '✗' if self.unicode else '[X]'

    @property
    def bullet(self) -> str:
        return '•' if self.unicode else '*'

    @property
    def rule(self) -> str:
        return '─' if self.unicode else '-'


def print_success(message: str, style: Style) -> None:
    print(f"{style.success(style.check)} {message}")


def print_error(message: str, style: Style) -> None:
    print(f"{style.error(style.cross)} {style.error(message)}", file=sys.stderr)


def print_warning(message: str, style: Style) -> None:
    if style.unicode:
        print(f"{style.warning('⚠')} {style.warning(message)}", file=sys.stderr)
    else:
        print(f"[!] {message}", file=sys.stderr)


def print_debug(message: str, style: Style, verbose: bool = True) -> None:
    """Diagnostics for --verbose runs. Always stderr so pipes stay clean."""
    if not verbose:
        return
    for line in message.split('\n'):
        print(style.dim(f"  {line}"), file=sys.stderr)


COMMIT_TYPE_COLORS = {
    'feat': Colors.GREEN,
    'fix': Colors.RED,
    'refactor': Colors.YELLOW,
    'docs': Colors.CYAN,
    'test': Colors.MAGENTA,
    'perf': Colors.GREEN,
    'chore': Colors.DIM,
    'style': Colors.DIM,
    'ci': Colors.CYAN,
    'build': Colors.CYAN,
    'revert': Colors.YELLOW,
}


def colorize_commit_type(message: str, style: Style) -> str:
    """Color the commit type prefix on the first line of a commit message."""
    if not style.color:
        return message
    lines = message.split('\n')
    match = re.match(r'^(\w+)(\([^)]*\))?(!?:)', lines[0])
    if match:
        color = COMMIT_TYPE_COLORS.get(match.group(1))
        if color:
            prefix = match.group(0)
            lines[0] = style._colorize(prefix, Colors.BOLD, color) + lines[0][len(prefix):]
    return '\n'.join(lines)


class Spinner:
    """Animated spinner for long operations. Use as context manager.

    The animation thread only advances a frame index; it is always joined
    before ``__exit__`` returns.
    """
    FRAMES_UNICODE = ['⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏']
    FRAMES_ASCII = ['-', '\\', '|', '/']
    INTERVAL = 0.08

    def __init__(self, message: str = "", style: Style | None = None,
                 stream: TextIO | None = None, newline: bool = False):
        self.message = message
        self.style = style or Style.plain()
        self.stream = stream or sys.stderr
        self.newline = newline
        self._thread = None
        self._stop_event = threading.Event()
        self._frames = self.frames_for(self.style)

    @classmethod
    def frames_for(cls, style: Style) -> list[str]:
        return cls.FRAMES_UNICODE if style.unicode else cls.FRAMES_ASCII

    def _is_tty(self) -> bool:
        return hasattr(self.stream, 'isatty') and self.stream.isatty()

    def _spin(self):
        idx = 0
        label = self.style.info(self.message) if self.message else ""
        while not self._stop_event.is_set():
            frame = self._frames[idx % len(self._frames)]
            print(f'\r\033[K{frame} {label}', end='', flush=True, file=self.stream)
            idx += 1
            self._stop_event.wait(self.INTERVAL)

    def __enter__(self):
        if self._is_tty():
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._spin, daemon=True)
            self._thread.start()
        return self

    def __exit__(self, *args):
        self._stop_event.set()
        if self._thread:
            self._thread.join()
            self._thread = None
        if self._is_tty():
            print('\r\033[2K', end='\n' if self.newline else '', flush=True, file=self.stream)


__all__ = [
    "Colors", "COLOR_MODES", "Style",
    "print_success", "print_error", "print_warning", "print_debug",
    "colorize_commit_type", "Spinner", "COMMIT_TYPE_COLORS",
]
