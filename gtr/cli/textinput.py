"""Where the text to translate comes from: arguments, stdin or a file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO, Optional, Sequence, TextIO, Union

MAX_STDIN_BYTES = 1 << 20


def strip_file_url_prefix(value: str) -> str:
    """Turn file:///path and file://path into a filesystem path."""
    value = value.strip()
    if value.startswith("file://"):
        value = value[len("file://"):]
        if value.startswith("//"):
            slash = value.find("/", 2)
            if slash >= 0:
                value = value[slash:]
    return value


def read_text_file(path: Union[str, os.PathLike]) -> str:
    """Read a UTF-8 text file capped at the stdin size limit, trimmed."""
    name = strip_file_url_prefix(os.fspath(path))
    if not name:
        raise ValueError("empty input path")
    try:
        raw = Path(name).read_bytes()
    except OSError as exc:
        raise OSError(f"read input file: {exc}") from exc
    if len(raw) > MAX_STDIN_BYTES:
        raise ValueError(f"input file exceeds {MAX_STDIN_BYTES} bytes")
    text = raw.decode("utf-8", "replace").strip()
    if not text:
        raise ValueError("empty input file")
    return text


def text_from_args_or_stdin(
    args: Sequence[str],
    stdin: Optional[Union[TextIO, BinaryIO]],
    stdin_is_tty: bool,
) -> str:
    """Return the joined arguments, or the trimmed stdin body when there are none."""
    if args:
        return " ".join(args)
    if stdin_is_tty or stdin is None:
        raise ValueError("no text to translate: provide arguments or pipe stdin")
    source = getattr(stdin, "buffer", stdin)
    try:
        chunk = source.read(MAX_STDIN_BYTES + 1)
    except OSError as exc:
        raise OSError(f"read stdin: {exc}") from exc
    raw = chunk.encode("utf-8") if isinstance(chunk, str) else chunk
    if len(raw) > MAX_STDIN_BYTES:
        raise ValueError(f"stdin exceeds {MAX_STDIN_BYTES} bytes")
    text = raw.decode("utf-8", "replace").strip()
    if not text:
        raise ValueError("empty stdin")
    return text