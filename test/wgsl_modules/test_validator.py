"""
Unit tests for naga-based validation.

The naga executable is replaced by a stub of subprocess.run so the tests do
not depend on it being installed.
"""

import subprocess

import pytest

from wgsl_modules.config import WgslModulesConfig
from wgsl_modules.errors import ValidationError, ValidatorNotFoundError
from wgsl_modules.validator import STDIN_FILE_NAME, NagaValidator


class FakeRun:
    """Stand-in for subprocess.run recording its invocations."""

    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls: list[tuple[list[str], dict]] = []

    def __call__(self, cmd: list[str], **kwargs) -> subprocess.CompletedProcess:
        self.calls.append((cmd, kwargs))
        return subprocess.CompletedProcess(cmd, self.returncode, stdout=self.stdout, stderr=self.stderr)


@pytest.mark.wgsl
class TestNagaValidator:
    """Test NagaValidator invocation and error mapping."""

    def test_valid_source(self, monkeypatch) -> None:
        """Test that a zero exit status passes validation."""
        fake_run = FakeRun()
        monkeypatch.setattr(subprocess, "run", fake_run)

        NagaValidator().validate("fn main() {}")

        cmd, kwargs = fake_run.calls[0]
        assert cmd == ["naga", "--stdin-file-path", STDIN_FILE_NAME]
        assert kwargs["input"] == "fn main() {}"
        assert kwargs["text"] is True

    def test_invalid_source(self, monkeypatch) -> None:
        """Test that naga's diagnostic becomes a ValidationError."""
        diagnostic = "error: expected ')', found end of file\n  ┌─ module.wgsl:1:11"
        monkeypatch.setattr(subprocess, "run", FakeRun(returncode=1, stderr=diagnostic + "\n"))

        with pytest.raises(ValidationError) as exc_info:
            NagaValidator().validate("fn broken(")

        assert exc_info.value.diagnostic == diagnostic
        assert "expected ')'" in str(exc_info.value)

    def test_invalid_source_without_output(self, monkeypatch) -> None:
        """Test the message when naga fails silently."""
        monkeypatch.setattr(subprocess, "run", FakeRun(returncode=2))

        with pytest.raises(ValidationError, match="status 2"):
            NagaValidator().validate("fn broken(")

    def test_missing_executable(self, monkeypatch) -> None:
        """Test that a missing naga binary raises ValidatorNotFoundError."""

        def raise_not_found(cmd, **kwargs):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr(subprocess, "run", raise_not_found)

        with pytest.raises(ValidatorNotFoundError) as exc_info:
            NagaValidator(executable="/opt/naga/bin/naga").validate("fn main() {}")

        assert exc_info.value.executable == "/opt/naga/bin/naga"

    def test_timeout(self, monkeypatch) -> None:
        """Test that a validator timeout is reported as a validation failure."""

        def time_out(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

        monkeypatch.setattr(subprocess, "run", time_out)

        with pytest.raises(ValidationError, match="timed out"):
            NagaValidator(timeout=0.5).validate("fn main() {}")

    def test_from_config(self, monkeypatch) -> None:
        """Test that the executable and timeout come from the configuration."""
        fake_run = FakeRun()
        monkeypatch.setattr(subprocess, "run", fake_run)
        config = WgslModulesConfig(naga_executable="naga-0.20", validation_timeout=3.0)

        NagaValidator.from_config(config)("fn main() {}")

        cmd, kwargs = fake_run.calls[0]
        assert cmd[0] == "naga-0.20"
        assert kwargs["timeout"] == 3.0
