"""WGSL validation of flattened module code.

Validation runs the ``naga`` command line tool on the flattened text of a root
module. naga parses the WGSL and validates it with every optional capability
enabled, so the result reflects syntax and semantics rather than a specific
hardware profile. Diagnostics refer to the flattened text.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Protocol

from wgsl_modules.config import WgslModulesConfig
from wgsl_modules.errors import ValidationError, ValidatorNotFoundError

logger = logging.getLogger(__name__)

# naga picks the front end from this name's extension when reading stdin
STDIN_FILE_NAME = "module.wgsl"


class SourceValidator(Protocol):
    def __call__(self, source: str) -> None: ...


class NagaValidator:
    """Validates WGSL source with the naga command line tool."""

    def __init__(self, executable: str = "naga", timeout: float | None = None) -> None:
        self.executable = executable
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: WgslModulesConfig) -> NagaValidator:
        return cls(executable=config.naga_executable, timeout=config.validation_timeout)

    def __call__(self, source: str) -> None:
        self.validate(source)

    def validate(self, source: str) -> None:
        """Validate flattened WGSL source.

        Args:
            source: The fully spliced module code.

        Raises:
            ValidationError: If naga reports a parse or validation error.
            ValidatorNotFoundError: If the naga executable cannot be started.
        """
        cmd = [self.executable, "--stdin-file-path", STDIN_FILE_NAME]
        try:
            result = subprocess.run(
                cmd,
                input=source,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise ValidatorNotFoundError(self.executable) from e
        except subprocess.TimeoutExpired as e:
            raise ValidationError(f"validation timed out after {self.timeout} seconds") from e

        if result.returncode != 0:
            diagnostic = (result.stderr or result.stdout).strip()
            logger.debug(f"naga rejected flattened source: {diagnostic}")
            raise ValidationError(diagnostic or f"naga exited with status {result.returncode}")
