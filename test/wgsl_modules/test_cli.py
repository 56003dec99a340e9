"""
Unit tests for the wgsl-modules command line.
"""

import pytest

from wgsl_modules.cli import main
from wgsl_modules.config import ENV_NAGA, ENV_VALIDATE


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch) -> None:
    monkeypatch.delenv(ENV_NAGA, raising=False)
    monkeypatch.delenv(ENV_VALIDATE, raising=False)


@pytest.mark.wgsl
class TestFlattenCommand:
    """Test the flatten subcommand."""

    def test_flatten_to_stdout(self, write_modules, capsys) -> None:
        """Test that flattened code is printed."""
        root = write_modules({"main.wgsl": 'x\n& include "b.inc"\ny\n', "b.inc": "Z"})

        exit_code = main(["flatten", str(root / "main.wgsl"), "--no-validate"])

        assert exit_code == 0
        assert capsys.readouterr().out == "x\nZ\ny\n"

    def test_flatten_to_file_with_depfile(self, write_modules) -> None:
        """Test writing the output and a dependency file."""
        root = write_modules({"main.wgsl": '& include "lib/b.wgsl";\n', "lib/b.wgsl": "B"})
        output = root / "build" / "main.wgsl"
        depfile = root / "build" / "main.d"

        exit_code = main(
            ["flatten", str(root / "main.wgsl"), "-o", str(output), "--depfile", str(depfile), "--no-validate"]
        )

        assert exit_code == 0
        assert output.read_text(encoding="utf-8") == "B\n"
        rule = depfile.read_text(encoding="utf-8")
        assert rule.startswith(f"{output}:")
        assert str(root / "lib" / "b.wgsl") in rule
        assert str(root / "main.wgsl") in rule

    def test_depfile_requires_output(self, write_modules, capsys) -> None:
        """Test that a depfile without an output file is rejected."""
        root = write_modules({"main.wgsl": "fn main() {}"})

        with pytest.raises(SystemExit) as exc_info:
            main(["flatten", str(root / "main.wgsl"), "--depfile", str(root / "main.d"), "--no-validate"])

        assert exc_info.value.code == 2
        assert "--depfile requires -o/--output" in capsys.readouterr().err
        assert not (root / "main.d").exists()

    def test_error_exit_status(self, write_modules, capsys) -> None:
        """Test that resolution errors are reported on stderr."""
        root = write_modules({"main.wgsl": '& include "missing.wgsl";\n'})

        exit_code = main(["flatten", str(root / "main.wgsl"), "--no-validate"])

        assert exit_code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "missing.wgsl" in captured.err

    def test_validation_disabled_in_project_settings(self, write_modules, capsys) -> None:
        """Test that --project-root settings are honoured."""
        root = write_modules(
            {
                "pyproject.toml": "[tool.wgsl-modules]\nvalidate = false\n",
                "main.wgsl": "not wgsl at all",
            }
        )

        exit_code = main(["--project-root", str(root), "flatten", str(root / "main.wgsl")])

        assert exit_code == 0
        assert capsys.readouterr().out == "not wgsl at all"


@pytest.mark.wgsl
class TestDepsCommand:
    """Test the deps subcommand."""

    def test_lists_sorted_dependencies(self, write_modules, capsys) -> None:
        """Test that every transitive dependency is printed once."""
        root = write_modules(
            {
                "main.wgsl": '& include "b.wgsl";\n& include "a.wgsl";\n',
                "a.wgsl": '& include "c.wgsl";\n',
                "b.wgsl": "",
                "c.wgsl": "",
            }
        )

        exit_code = main(["deps", str(root / "main.wgsl"), "--no-validate"])

        assert exit_code == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines == [str(root / "a.wgsl"), str(root / "b.wgsl"), str(root / "c.wgsl")]

    def test_cycle_reported(self, write_modules, capsys) -> None:
        """Test that include cycles fail the command."""
        root = write_modules({"a.wgsl": '& include "b.wgsl";\n', "b.wgsl": '& include "a.wgsl";\n'})

        exit_code = main(["deps", str(root / "a.wgsl"), "--no-validate"])

        assert exit_code == 1
        assert "circular dependency" in capsys.readouterr().err
