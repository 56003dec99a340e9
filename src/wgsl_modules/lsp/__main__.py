"""Entry point for running the WGSL modules LSP server as a module.

Usage:
    python -m wgsl_modules.lsp
"""

from wgsl_modules.lsp.server import main

if __name__ == "__main__":
    main()
