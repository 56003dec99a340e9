"""
Unit tests for the Module model and its standalone loaders.
"""

import pytest

from wgsl_modules.config import ENV_VALIDATE
from wgsl_modules.errors import CircularDependencyError
from wgsl_modules.module import Module


@pytest.fixture(autouse=True)
def disable_validation(monkeypatch) -> None:
    monkeypatch.setenv(ENV_VALIDATE, "0")


@pytest.mark.wgsl
class TestModule:
    """Test Module construction and standalone loading."""

    def test_unresolved_module(self) -> None:
        """Test a freshly constructed module before resolution."""
        module = Module('& include "b.wgsl";\nfn main() {}')

        assert module.source == '& include "b.wgsl";\nfn main() {}'
        assert module.code == ""
        assert [include.path for include in module.includes] == ["b.wgsl"]
        assert list(module.dependencies()) == []

    def test_includes_is_a_copy(self) -> None:
        """Test that callers cannot alter the scanned directives."""
        module = Module('& include "b.wgsl";\n')

        module.includes.clear()

        assert len(module.includes) == 1

    def test_load_from_path(self, write_modules) -> None:
        """Test resolving a file with a private cache."""
        root = write_modules({"a.wgsl": '& include "b.wgsl";\nfn a() {}', "b.wgsl": "fn b() {}"})

        module = Module.load_from_path(root / "a.wgsl")

        assert module.code == "fn b() {}\nfn a() {}"
        assert set(module.dependencies()) == {root / "b.wgsl"}

    def test_load_with_source(self, write_modules) -> None:
        """Test resolving in-memory source with a private cache."""
        root = write_modules({"b.wgsl": "fn b() {}"})

        module = Module.load(root / "main.wgsl", '/* & include "b.wgsl" */\nfn main() {}')

        assert module.code == "fn b() {}\nfn main() {}"

    def test_load_propagates_errors(self, write_modules) -> None:
        """Test that resolution errors reach the caller."""
        root = write_modules({"b.wgsl": '& include "main.wgsl";\n'})

        with pytest.raises(CircularDependencyError):
            Module.load(root / "main.wgsl", '& include "b.wgsl";\n')
