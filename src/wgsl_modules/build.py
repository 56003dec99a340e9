"""Incremental rebuild helpers built on module dependency sets."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)


def is_outdated(
    module_path: str | os.PathLike[str],
    dependencies: Iterable[str | os.PathLike[str]],
    artifact: str | os.PathLike[str],
) -> bool:
    """Check whether a compiled artifact must be rebuilt.

    Args:
        module_path: Path of the root module source.
        dependencies: The root module's dependency paths.
        artifact: Path of the artifact built from the flattened code.

    Returns:
        True if the artifact is missing, or if the root module or any
        dependency is missing or was modified after the artifact.
    """
    try:
        built_at = Path(artifact).stat().st_mtime
    except FileNotFoundError:
        return True

    for path in (module_path, *dependencies):
        try:
            modified_at = Path(path).stat().st_mtime
        except FileNotFoundError:
            logger.debug(f"Dependency {path} no longer exists")
            return True
        if modified_at > built_at:
            logger.debug(f"{path} is newer than {artifact}")
            return True

    return False


def _escape_make_path(path: str | os.PathLike[str]) -> str:
    return str(path).replace("\\", "/").replace(" ", "\\ ").replace("$", "$$")


def format_depfile(target: str | os.PathLike[str], dependencies: Iterable[str | os.PathLike[str]]) -> str:
    """Render a Makefile-style dependency rule ``target: dep ...``.

    Dependencies are sorted so the output is stable between runs.
    """
    rule = f"{_escape_make_path(target)}:"
    for dep in sorted(_escape_make_path(dep) for dep in dependencies):
        rule += f" {dep}"
    return rule + "\n"
