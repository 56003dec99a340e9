"""Module Cache for resolving WGSL include graphs.

This module provides the ModuleCache class, which maps canonical paths to
fully resolved modules. Resolution is a recursive descent over the include
graph: every included module is resolved and cached before the including
module splices it in, so an entry visible in the cache is always complete.
A trace of the paths currently being resolved turns include cycles into a
CircularDependencyError instead of unbounded recursion.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path

from wgsl_modules.config import WgslModulesConfig, load_config
from wgsl_modules.errors import CircularDependencyError
from wgsl_modules.module import Module, read_source
from wgsl_modules.paths import normpath, parent_path
from wgsl_modules.validator import NagaValidator, SourceValidator

logger = logging.getLogger(__name__)

SourceReader = Callable[[Path], str]


class ModuleCache:
    """Cache of resolved modules keyed by canonical path.

    A cache may be reused across several top-level loads so that shared
    includes are read and resolved once. It is not safe for concurrent use.
    """

    def __init__(
        self,
        validator: SourceValidator | None = None,
        *,
        config: WgslModulesConfig | None = None,
        reader: SourceReader | None = None,
    ) -> None:
        """Initialize an empty cache.

        Args:
            validator: Callable checking the flattened code of root modules.
                Defaults to a NagaValidator unless validation is disabled in
                the configuration.
            config: Loader settings. Defaults to ``load_config()``.
            reader: Callable returning the source text of a path. Defaults to
                reading the file with the configured encoding.
        """
        self._config = config if config is not None else load_config()
        if validator is None and self._config.validate:
            validator = NagaValidator.from_config(self._config)
        self._validator = validator
        self._reader = reader if reader is not None else self._read_file

        self._modules: dict[Path, Module] = {}

        # Paths whose code has passed validation as a root module
        self._validated: set[Path] = set()

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        return normpath(path) in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def _read_file(self, path: Path) -> str:
        return read_source(path, encoding=self._config.encoding)

    def resolve_module(self, module_trace: list[Path], path: Path) -> Module:
        """Resolve the module at a canonical path, reusing cached entries.

        Args:
            module_trace: Paths currently being resolved, innermost last.
            path: Canonical path of the module to resolve.

        Returns:
            The fully resolved module.

        Raises:
            CircularDependencyError: If ``path`` is already being resolved.
            ModuleIOError: If a source file cannot be read.
            InvalidPathError: If a path has no parent directory.
        """
        if path in module_trace:
            raise CircularDependencyError(path, module_trace[-1])

        module = self._modules.get(path)
        if module is not None:
            logger.debug(f"Reusing cached module {path}")
            return module

        logger.debug(f"Loading module {path}")
        module = Module(self._reader(path))

        dir_path = parent_path(path)

        module_trace.append(path)
        module.resolve_includes(self, module_trace, dir_path)
        module_trace.pop()

        self._modules[path] = module
        return module

    def _load(self, path: Path, source_code: str | None) -> Module:
        dir_path = parent_path(path)

        replacing = source_code is not None
        module = None if replacing else self._modules.get(path)

        if module is None:
            if source_code is None:
                source_code = self._reader(path)
            module = Module(source_code)
            module.resolve_includes(self, [path], dir_path)
            self._validated.discard(path)

        if path not in self._validated:
            if self._validator is not None:
                self._validator(module.code)
            self._validated.add(path)

        if replacing and path in self._modules:
            self._evict_includers(path)

        self._modules[path] = module
        return module

    def _evict_includers(self, path: Path) -> None:
        # Includers spliced the replaced code; resolve them again on next use
        for cached_path, cached in list(self._modules.items()):
            if path in cached._dependencies:
                logger.debug(f"Evicting {cached_path}, it includes replaced module {path}")
                del self._modules[cached_path]
                self._validated.discard(cached_path)

    # module loading

    def load(self, path: str | os.PathLike[str], source_code: str) -> Module:
        """Resolve a module whose source text is supplied by the caller.

        Includes are resolved relative to the directory of ``path``, which
        also becomes the module's cache key. An existing entry for the same
        path is replaced, and cached modules that include it are evicted so
        they are resolved again from the new source.

        Raises:
            ModuleError: On the first read, cycle, path or validation error.
        """
        return self._load(normpath(path), source_code)

    def load_from_path(self, path: str | os.PathLike[str]) -> Module:
        """Read and resolve the module stored at ``path``.

        A module already in the cache is not read again.

        Raises:
            ModuleError: On the first read, cycle, path or validation error.
        """
        return self._load(normpath(path), None)

    # accessors

    def module(self, path: str | os.PathLike[str]) -> Module | None:
        """Return the cached module for ``path``, or None."""
        return self._modules.get(normpath(path))

    def modules(self) -> Iterator[tuple[Path, Module]]:
        """Iterate ``(canonical path, module)`` pairs of every cached module."""
        return iter(list(self._modules.items()))

    def detach(self, path: str | os.PathLike[str]) -> Module:
        """Remove a module from the cache and return it.

        Raises:
            KeyError: If the module is not cached.
        """
        path = normpath(path)
        self._validated.discard(path)
        return self._modules.pop(path)

    def clear(self) -> None:
        """Drop every cached module."""
        self._modules.clear()
        self._validated.clear()


def flatten(path: str | os.PathLike[str], cache: ModuleCache | None = None) -> str:
    """Return the flattened, validated code of the module at ``path``."""
    cache = cache if cache is not None else ModuleCache()
    return cache.load_from_path(path).code
