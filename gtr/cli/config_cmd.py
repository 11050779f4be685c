"""The "config" command: show, get, set and unset keys in ~/.gtrrc."""

from __future__ import annotations

import contextlib
import os
import sys
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence, TextIO, Union

from gtr.config import (
    config_file_path,
    config_file_value_for_path,
    is_known_config_key,
    known_config_keys,
)

PathLike = Union[str, os.PathLike]


def _resolve(path: Optional[PathLike]) -> Path:
    if path is not None:
        return Path(path)
    found = config_file_path()
    if found is None:
        raise OSError("cannot determine config file location")
    return found


def _require_known(key: str) -> None:
    if not is_known_config_key(key):
        supported = ", ".join(known_config_keys())
        raise ValueError(f'unknown config key "{key}" (supported: {supported})')


def _read_lines(path: Path) -> List[str]:
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except OSError as exc:
        raise OSError(f"read config: {exc}") from exc
    return content.rstrip("\n").split("\n")


def _write_lines(path: Path, lines: List[str]) -> None:
    while lines and not lines[-1].strip():
        lines = lines[:-1]
    content = "\n".join(lines) + "\n"
    fd, tmp = tempfile.mkstemp(prefix=".gtrrc-", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        os.replace(tmp, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.remove(tmp)
        raise


def _is_entry_for(line: str, key: str) -> bool:
    name, sep, _ = line.partition("=")
    return bool(sep) and name.strip() == key


def show_config(out: Optional[TextIO] = None, path: Optional[PathLike] = None) -> None:
    """Print the config file location and every key's file and effective values."""
    out = out if out is not None else sys.stdout
    if path is None:
        path = config_file_path()
    out.write(f"Config file: {'' if path is None else os.fspath(path)}\n")
    if path is None:
        out.write("(could not determine home directory)\n")
    else:
        try:
            os.stat(path)
        except FileNotFoundError:
            out.write("(file does not exist)\n")
        except OSError as exc:
            out.write(f"(error: {exc})\n")

    out.write("\n")
    out.write("Key                  File value    Effective value\n")
    out.write("---                  ----------    ---------------\n")
    for key in known_config_keys():
        file_value = config_file_value_for_path(path, key) if path is not None else ""
        env_value = os.environ.get(key, "")
        effective = env_value or file_value or "-"
        line = f"{key:<20} {file_value or '-':<12}  {effective}"
        if env_value:
            line += "  (from env)"
        out.write(line + "\n")


def config_get(key: str, path: Optional[PathLike] = None) -> str:
    """Return the file value of ``key``, or "" when it is not set."""
    try:
        resolved = _resolve(path)
    except OSError:
        return ""
    return config_file_value_for_path(resolved, key.strip())


def config_set(key: str, value: str, path: Optional[PathLike] = None) -> None:
    """Set ``key`` to ``value``, replacing an existing entry or appending one."""
    key, value = key.strip(), value.strip()
    resolved = _resolve(path)
    lines = _read_lines(resolved)
    entry = f"{key}={value}"
    for index, raw in enumerate(lines):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if _is_entry_for(line, key):
            lines[index] = entry
            break
    else:
        lines.append(entry)
    _write_lines(resolved, lines)


def config_unset(key: str, path: Optional[PathLike] = None) -> None:
    """Remove every entry for ``key``."""
    key = key.strip()
    resolved = _resolve(path)
    kept = []
    for raw in _read_lines(resolved):
        line = raw.strip()
        if line and not line.startswith("#") and _is_entry_for(line, key):
            continue
        kept.append(line)
    _write_lines(resolved, kept)


def _expect_args(name: str, args: Sequence[str], count: int) -> None:
    if len(args) != count:
        raise ValueError(f'"{name}" accepts {count} arg(s), received {len(args)}')


def run_config(args: Sequence[str], out: Optional[TextIO] = None) -> None:
    """Run the config command with its arguments (without the word "config")."""
    out = out if out is not None else sys.stdout
    args = list(args)
    if not args:
        show_config(out)
        return
    command, rest = args[0], args[1:]
    if command == "set":
        _expect_args("set", rest, 2)
        key, value = rest[0].strip(), rest[1].strip()
        _require_known(key)
        config_set(key, value)
        out.write(f"Set {key}={value}\n")
    elif command == "get":
        _expect_args("get", rest, 1)
        key = rest[0].strip()
        _require_known(key)
        value = config_get(key)
        out.write(f"{key} is not set\n" if not value else f"{value}\n")
    elif command == "unset":
        _expect_args("unset", rest, 1)
        key = rest[0].strip()
        _require_known(key)
        config_unset(key)
        out.write(f"Removed {key}\n")
    elif command == "path":
        found = config_file_path()
        if found is None:
            raise OSError("could not determine config file location")
        out.write(f"{found}\n")
    else:
        raise ValueError(f'unknown config command "{command}"')