"""Exceptions raised while loading and resolving WGSL modules."""

from __future__ import annotations

from pathlib import Path


class ModuleError(Exception):
    """Base class for every module resolution failure."""


class ModuleIOError(ModuleError):
    """A module source could not be read.

    Attributes:
        path: The path that failed to load.
        cause: The underlying exception.
    """

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        reason = cause.strerror if isinstance(cause, OSError) and cause.strerror else str(cause)
        super().__init__(f"{reason} '{path}'")


class CircularDependencyError(ModuleError):
    """A module was requested again while it was still being resolved.

    Attributes:
        path: The path closing the cycle.
        referrer: The module whose include directive requested ``path``.
    """

    def __init__(self, path: Path, referrer: Path) -> None:
        self.path = path
        self.referrer = referrer
        super().__init__(f"circular dependency {path} from {referrer}")


class InvalidPathError(ModuleError):
    """A path has no parent directory to resolve relative includes against."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"invalid path '{path}'")


class ValidationError(ModuleError):
    """The flattened code of a root module failed WGSL validation.

    The diagnostic refers to positions in the flattened code, not in the
    individual source files.
    """

    def __init__(self, diagnostic: str, path: Path | None = None) -> None:
        self.diagnostic = diagnostic
        self.path = path
        super().__init__(diagnostic)


class ValidatorNotFoundError(ModuleError):
    """The validator executable could not be started."""

    def __init__(self, executable: str) -> None:
        self.executable = executable
        super().__init__(f"validator executable '{executable}' not found")
