"""Include resolution for WGSL shader modules.

Shader sources reference each other with ``& include "path"`` directives.
This package splices included files into a single flattened source, detects
include cycles, tracks the files each module depends on and validates the
result with naga.

    from wgsl_modules import ModuleCache

    cache = ModuleCache()
    module = cache.load_from_path("shaders/main.wgsl")
    pipeline_source = module.code
"""

__version__ = "0.1.0"

from wgsl_modules.errors import (
    CircularDependencyError,
    InvalidPathError,
    ModuleError,
    ModuleIOError,
    ValidationError,
    ValidatorNotFoundError,
)
from wgsl_modules.include_directive import IncludeDirective
from wgsl_modules.include_directive_parser import IncludeDirectiveParser, scan_includes
from wgsl_modules.module import Module
from wgsl_modules.module_cache import ModuleCache, flatten
from wgsl_modules.paths import normpath

__all__ = [
    "CircularDependencyError",
    "IncludeDirective",
    "IncludeDirectiveParser",
    "InvalidPathError",
    "Module",
    "ModuleCache",
    "ModuleError",
    "ModuleIOError",
    "ValidationError",
    "ValidatorNotFoundError",
    "flatten",
    "normpath",
    "scan_includes",
]
