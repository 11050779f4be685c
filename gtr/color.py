"""ANSI colour helpers that switch off for pipes, --no-color and NO_COLOR."""

from __future__ import annotations

import os
import sys

RESET = "\033[0m"
BOLD = "\033[1m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
CYAN = "\033[36m"

ENV_NO_COLOR = "NO_COLOR"


class _ColorState:
    def __init__(self) -> None:
        self.enabled = True


_state = _ColorState()


def _stdout_is_tty() -> bool:
    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


def init_color_out(no_color_flag: bool) -> None:
    """Disable colour when asked to, when NO_COLOR is set, or when stdout is no terminal."""
    if no_color_flag or os.environ.get(ENV_NO_COLOR) or not _stdout_is_tty():
        _state.enabled = False


def _wrap(code: str, text: str) -> str:
    return f"{code}{text}{RESET}" if _state.enabled else text


def bold(text: str) -> str:
    """Wrap ``text`` in bold when colour is on."""
    return _wrap(BOLD, text)


def green(text: str) -> str:
    """Wrap ``text`` in green when colour is on."""
    return _wrap(GREEN, text)


def yellow(text: str) -> str:
    """Wrap ``text`` in yellow when colour is on."""
    return _wrap(YELLOW, text)


def cyan(text: str) -> str:
    """Wrap ``text`` in cyan when colour is on."""
    return _wrap(CYAN, text)


def color_heading(fmt: str, *args: object) -> str:
    """Format a heading with %-style arguments and make it bold."""
    return bold(fmt % args if args else fmt)