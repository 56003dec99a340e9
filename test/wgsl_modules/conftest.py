"""Shared fixtures for WGSL module tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from wgsl_modules.config import WgslModulesConfig
from wgsl_modules.errors import ValidationError
from wgsl_modules.module import read_source


class RecordingValidator:
    """Validator stub recording the sources it was asked to check.

    Sources containing ``reject_marker`` fail validation.
    """

    def __init__(self, reject_marker: str | None = None) -> None:
        self.reject_marker = reject_marker
        self.sources: list[str] = []

    def __call__(self, source: str) -> None:
        self.sources.append(source)
        if self.reject_marker is not None and self.reject_marker in source:
            raise ValidationError(f"error: unexpected '{self.reject_marker}'")


class CountingReader:
    """Source reader counting how often each path is read from disk."""

    def __init__(self) -> None:
        self.reads: dict[Path, int] = {}

    def __call__(self, path: Path) -> str:
        self.reads[path] = self.reads.get(path, 0) + 1
        return read_source(path)


@pytest.fixture
def write_modules(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Write ``{relative path: source}`` files below tmp_path and return tmp_path."""

    def write(files: dict[str, str]) -> Path:
        for name, source in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(source, encoding="utf-8")
        return tmp_path

    return write


@pytest.fixture
def validator() -> RecordingValidator:
    return RecordingValidator()


@pytest.fixture
def config() -> WgslModulesConfig:
    return WgslModulesConfig(validate=False)
