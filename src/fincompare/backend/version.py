"""Version string reported by ``/health`` and the configuration metadata."""

from __future__ import annotations

import re
from functools import lru_cache
from importlib import metadata
from pathlib import Path

PACKAGE_NAME = "fincompare"
UNKNOWN_VERSION = "0+unknown"

PYPROJECT_PATH = Path(__file__).resolve().parents[3] / "pyproject.toml"

_PROJECT_VERSION = re.compile(
    r'^\[project\][^\[]*?^version\s*=\s*"(?P<version>[^"]+)"', re.MULTILINE | re.DOTALL
)


def version_from_pyproject(path: Path | None = None) -> str | None:
    """Return ``[project].version`` from a checkout's ``pyproject.toml``."""

    path = path or PYPROJECT_PATH
    if not path.is_file():
        return None
    match = _PROJECT_VERSION.search(path.read_text(encoding="utf-8"))
    return match.group("version") if match else None


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Installed distribution version, else the checkout's declared version."""

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return version_from_pyproject() or UNKNOWN_VERSION


__all__ = ["PACKAGE_NAME", "UNKNOWN_VERSION", "get_project_version", "version_from_pyproject"]
