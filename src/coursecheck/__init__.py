"""coursecheck package."""

from __future__ import annotations

import re
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

__all__ = ["__version__"]


def _version_from_pyproject() -> str | None:
    """Best-effort version lookup from a source checkout's pyproject.toml."""
    for base in Path(__file__).resolve().parents:
        pyproject = base / "pyproject.toml"
        if not pyproject.exists():
            continue
        in_project = False
        for line in pyproject.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if stripped.startswith("[") and stripped.endswith("]"):
                in_project = stripped == "[project]"
                continue
            if in_project:
                match = re.match(r'^version\s*=\s*"([^"]+)"\s*$', stripped)
                if match:
                    return match.group(1)
        # Only the nearest pyproject.toml describes this package.
        return None
    return None


_local_version = _version_from_pyproject()
if _local_version is not None:
    __version__ = _local_version
else:
    try:
        __version__ = version("coursecheck")
    except PackageNotFoundError:
        __version__ = "0+unknown"
