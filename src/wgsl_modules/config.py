"""Configuration for WGSL module loading.

Settings are read from the ``[tool.wgsl-modules]`` table of a project's
``pyproject.toml`` and may be overridden through environment variables:

    WGSL_MODULES_NAGA       path of the naga executable
    WGSL_MODULES_VALIDATE   "0"/"false"/"no"/"off" disables validation
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

PYPROJECT_TABLE = "wgsl-modules"
ENV_NAGA = "WGSL_MODULES_NAGA"
ENV_VALIDATE = "WGSL_MODULES_VALIDATE"

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class WgslModulesConfig:
    """Settings shared by the resolver, the command line and the language server.

    Attributes:
        naga_executable: Command used to validate flattened WGSL
        validate: Whether root modules are validated after flattening
        encoding: Text encoding of module source files
        validation_timeout: Seconds to wait for the validator, None for no limit
    """

    naga_executable: str = "naga"
    validate: bool = True
    encoding: str = "utf-8"
    validation_timeout: float | None = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> WgslModulesConfig:
        """Build a config from a TOML table, accepting dashed or underscored keys."""
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in values.items():
            name = key.replace("-", "_")
            if name not in known:
                logger.warning(f"Ignoring unknown wgsl-modules setting: {key}")
                continue
            kwargs[name] = value
        return cls(**kwargs)

    def with_env(self, environ: Mapping[str, str] | None = None) -> WgslModulesConfig:
        """Return a copy with environment overrides applied."""
        environ = os.environ if environ is None else environ
        config = self
        if naga := environ.get(ENV_NAGA):
            config = replace(config, naga_executable=naga)
        if (validate := environ.get(ENV_VALIDATE)) is not None:
            config = replace(config, validate=validate.strip().lower() not in _FALSE_VALUES)
        return config


def load_config(project_root: str | os.PathLike[str] | None = None) -> WgslModulesConfig:
    """Load the configuration for a project.

    Args:
        project_root: Directory holding ``pyproject.toml``. When None or when
            the file is absent, defaults are used.

    Returns:
        The configuration with environment overrides applied.
    """
    config = WgslModulesConfig()

    if project_root is not None:
        pyproject_path = Path(project_root) / "pyproject.toml"
        if pyproject_path.is_file():
            with open(pyproject_path, "rb") as f:
                pyproject = tomllib.load(f)
            table = pyproject.get("tool", {}).get(PYPROJECT_TABLE, {})
            config = WgslModulesConfig.from_mapping(table)
            logger.debug(f"Loaded wgsl-modules settings from {pyproject_path}")

    return config.with_env()
