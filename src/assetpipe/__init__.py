"""Pluggable convert-then-compress pipeline for web assets."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from importlib import metadata
from pathlib import Path

PACKAGE_NAME = "assetpipe"


def _source_checkout_version() -> str | None:
    """Read `[project].version` when running from a source checkout."""

    here = Path(__file__).resolve().parent
    for directory in (here, *here.parents):
        pyproject = directory / "pyproject.toml"
        if not pyproject.is_file():
            continue
        try:
            with pyproject.open("rb") as handle:
                project = tomllib.load(handle).get("project")
        except (OSError, tomllib.TOMLDecodeError):  # pragma: no cover - filesystem errors
            return None
        if not isinstance(project, dict) or project.get("name") != PACKAGE_NAME:
            return None
        version = project.get("version")
        if isinstance(version, str) and version.strip():
            return version.strip()
        return None
    return None


@lru_cache(maxsize=1)
def get_version() -> str:
    """Return the assetpipe version, preferring the checkout's pyproject over installed metadata."""

    version = _source_checkout_version()
    if version is not None:
        return version

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError as exc:  # pragma: no cover - occurs in dev
        raise RuntimeError("Unable to determine assetpipe version.") from exc


__all__ = ["get_version"]
