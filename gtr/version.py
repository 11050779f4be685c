"""The version string reported by the command line."""

from __future__ import annotations

import os
from importlib import metadata


def version_string(version: str = "dev", commit: str = "") -> str:
    """Combine a release version and commit, falling back to GTR_VERSION or package metadata."""
    if version != "dev":
        if commit:
            if version == commit or version.startswith(commit + "-"):
                return version
            return f"{version}-{commit}"
        return version
    if commit:
        return commit
    from_env = os.environ.get("GTR_VERSION", "").strip()
    if from_env:
        return from_env
    try:
        installed = metadata.version("gtr")
    except metadata.PackageNotFoundError:
        installed = ""
    if installed and installed != "(devel)":
        return installed
    return "dev"