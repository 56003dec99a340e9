"""WGSL Modules Language Server Package.

This package provides a pygls-based LSP server reporting include resolution
and validation errors for WGSL module files.
"""

from wgsl_modules.lsp.server import WgslModulesLanguageServer

__all__ = ["WgslModulesLanguageServer"]
