"""Lexical path helpers for module resolution.

Include paths are resolved relative to the directory of the file that
contains them. Canonical paths are produced purely lexically so that the
same file reached through different relative spellings maps to one cache key.
"""

from __future__ import annotations

import os
from pathlib import Path

from wgsl_modules.errors import InvalidPathError


def normpath(path: str | os.PathLike[str]) -> Path:
    """Normalize ``.`` and ``..`` segments without touching the filesystem.

    ``..`` collapses against a preceding real segment. When there is none it
    is kept as a leading ``..``, except directly after an anchor (``/`` or a
    drive) where it is dropped. Symlinks are never resolved.

    Args:
        path: The path to normalize.

    Returns:
        The canonical lexical form of ``path``.
    """
    path = Path(path)
    parts: list[str] = []
    level = 0

    for part in path.parts:
        if path.anchor and not parts and part == path.anchor:
            parts.append(part)
        elif part == "..":
            if level:
                parts.pop()
                level -= 1
            elif not path.anchor:
                parts.append(part)
        elif part != ".":
            parts.append(part)
            level += 1

    return Path(*parts) if parts else Path()


def parent_path(path: Path) -> Path:
    """Return the directory containing ``path``.

    Raises:
        InvalidPathError: If ``path`` has no parent distinct from itself
            (the filesystem root, ``.`` or the empty path).
    """
    parent = path.parent
    if parent == path:
        raise InvalidPathError(path)
    return parent
