"""WGSL module model and include splicing.

A Module holds the raw text of one source file, the include directives found
in it and, once resolved, its flattened code together with the set of files
it transitively depends on.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from wgsl_modules.errors import ModuleIOError
from wgsl_modules.include_directive import IncludeDirective
from wgsl_modules.include_directive_parser import scan_includes
from wgsl_modules.paths import normpath

if TYPE_CHECKING:
    from wgsl_modules.module_cache import ModuleCache

logger = logging.getLogger(__name__)


def read_source(path: Path, encoding: str = "utf-8") -> str:
    """Read a module's source text from storage.

    Raises:
        ModuleIOError: If the file cannot be read or decoded.
    """
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        raise ModuleIOError(path, e) from e


class Module:
    """One WGSL source file and its resolution results.

    ``code`` is empty and ``dependencies`` is empty until the owning
    ModuleCache has resolved the module's includes.
    """

    def __init__(self, source: str) -> None:
        self._source = source
        self._includes: list[IncludeDirective] = scan_includes(source)
        self._dependencies: set[Path] = set()
        self._code = ""

    def __repr__(self) -> str:
        return f"Module(includes={len(self._includes)}, dependencies={len(self._dependencies)})"

    # accessors

    @property
    def source(self) -> str:
        return self._source

    @property
    def code(self) -> str:
        """The flattened source, ready to hand to the shader compiler."""
        return self._code

    @property
    def includes(self) -> list[IncludeDirective]:
        return list(self._includes)

    def dependencies(self) -> Iterator[Path]:
        """Iterate the canonical paths of every transitively included file."""
        return iter(self._dependencies)

    # resolution

    def resolve_includes(self, cache: ModuleCache, module_trace: list[Path], dir_path: Path) -> None:
        """Splice the flattened code of every included module into this one.

        Directives are processed from the highest offset down, so replacing
        one never shifts the offsets of the directives still to come.

        Args:
            cache: The cache used to resolve (and memoize) included modules.
            module_trace: Paths currently being resolved, innermost last.
            dir_path: Directory that relative include paths are joined to.
        """
        code = self._source

        for include in reversed(self._includes):
            include_path = normpath(dir_path / include.path)

            module = cache.resolve_module(module_trace, include_path)

            self._dependencies.update(module._dependencies)
            self._dependencies.add(include_path)

            code = code[: include.start] + module.code + code[include.end :]
            logger.debug(f"Spliced {include_path} into range {include.start}:{include.end}")

        self._code = code

    # module loading

    @classmethod
    def load(cls, path: str | os.PathLike[str], source_code: str) -> Module:
        """Resolve ``source_code`` as the module at ``path`` with a fresh cache."""
        from wgsl_modules.module_cache import ModuleCache

        cache = ModuleCache()
        cache.load(path, source_code)
        return cache.detach(path)

    @classmethod
    def load_from_path(cls, path: str | os.PathLike[str]) -> Module:
        """Read and resolve the module at ``path`` with a fresh cache."""
        from wgsl_modules.module_cache import ModuleCache

        cache = ModuleCache()
        cache.load_from_path(path)
        return cache.detach(path)
