"""Send output through the user's pager."""

from __future__ import annotations

import contextlib
import os
import shutil
import subprocess
from typing import Iterator, TextIO


def _pager_command() -> str:
    pager = os.environ.get("PAGER", "").strip()
    if pager:
        return pager
    return "more" if os.name == "nt" else "less -R"


@contextlib.contextmanager
def open_pager() -> Iterator[TextIO]:
    """Start $PAGER (or less -R / more) and yield a text stream feeding it."""
    argv = _pager_command().split()
    if not argv:
        raise ValueError("empty PAGER")
    binary = shutil.which(argv[0])
    if binary is None:
        raise FileNotFoundError(f"pager {argv[0]!r}: executable file not found in $PATH")
    proc = subprocess.Popen(
        [binary, *argv[1:]], stdin=subprocess.PIPE, text=True, encoding="utf-8"
    )
    try:
        yield proc.stdin
    finally:
        with contextlib.suppress(OSError):
            proc.stdin.close()
        proc.wait()