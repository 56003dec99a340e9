"""Entry point for running the command line interface as a module.

Usage:
    python -m wgsl_modules flatten shaders/main.wgsl
"""

import sys

from wgsl_modules.cli import main

if __name__ == "__main__":
    sys.exit(main())
