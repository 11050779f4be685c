"""Default settings from the environment and the ~/.gtrrc file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Union

_KNOWN_KEYS = ("GTR_DEFAULT_ENGINE", "GTR_DEFAULT_TARGET", "GTR_TIMEOUT")


def config_file_path() -> Optional[Path]:
    """Return the path of ~/.gtrrc, or None when the home directory is unknown."""
    try:
        return Path.home() / ".gtrrc"
    except (RuntimeError, KeyError):
        return None


def known_config_keys() -> list[str]:
    """Return the supported config keys."""
    return list(_KNOWN_KEYS)


def is_known_config_key(key: str) -> bool:
    """Report whether ``key`` is a supported config key."""
    return key in _KNOWN_KEYS


def config_file_value_for_path(path: Union[str, os.PathLike], key: str) -> str:
    """Read a .gtrrc-style file and return the value of ``key``, or ""."""
    try:
        content = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return ""
    for line in content.split("\n"):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        name, sep, value = line.partition("=")
        if not sep:
            continue
        if name.strip() == key:
            return value.strip()
    return ""


def env_override(key: str) -> str:
    """Return ``key`` from the environment, else from ~/.gtrrc, else ""."""
    value = os.environ.get(key, "").strip()
    if value:
        return value
    path = config_file_path()
    if path is None:
        return ""
    return config_file_value_for_path(path, key)


def default_engine() -> str:
    """Return the configured default engine, or "auto"."""
    return env_override("GTR_DEFAULT_ENGINE") or "auto"


def default_target() -> str:
    """Return the configured default target language, if any."""
    return env_override("GTR_DEFAULT_TARGET")