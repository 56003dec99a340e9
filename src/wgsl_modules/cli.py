"""Command line interface for flattening WGSL modules.

Usage:
    wgsl-modules flatten shaders/main.wgsl -o build/main.wgsl --depfile build/main.d
    wgsl-modules deps shaders/main.wgsl
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from wgsl_modules.build import format_depfile
from wgsl_modules.config import load_config
from wgsl_modules.errors import ModuleError
from wgsl_modules.module_cache import ModuleCache

logger = logging.getLogger(__name__)


def create_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wgsl-modules",
        description="Resolve '& include' directives in WGSL shaders into a single validated source.",
    )
    parser.add_argument("--project-root", type=str, default=None, help="Directory holding pyproject.toml settings")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log resolution steps")
    subparsers = parser.add_subparsers(dest="command", required=True)

    flatten_parser = subparsers.add_parser("flatten", help="Write the flattened source of a module")
    flatten_parser.add_argument("path", type=str, help="Root module path")
    flatten_parser.add_argument("-o", "--output", type=str, default=None, help="Output file (default: stdout)")
    flatten_parser.add_argument("--depfile", type=str, default=None, help="Write a Makefile-style dependency file")
    flatten_parser.add_argument("--no-validate", action="store_true", help="Skip naga validation")

    deps_parser = subparsers.add_parser("deps", help="List the files a module depends on")
    deps_parser.add_argument("path", type=str, help="Root module path")
    deps_parser.add_argument("--no-validate", action="store_true", help="Skip naga validation")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = create_arg_parser()
    args = parser.parse_args(argv)
    if args.command == "flatten" and args.depfile and not args.output:
        parser.error("--depfile requires -o/--output")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.project_root)
    if args.no_validate:
        config = replace(config, validate=False)

    cache = ModuleCache(config=config)
    try:
        module = cache.load_from_path(args.path)
    except ModuleError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command == "deps":
        for dependency in sorted(str(path) for path in module.dependencies()):
            print(dependency)
        return 0

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(module.code, encoding=config.encoding)
        logger.info(f"Wrote {output_path}")
    else:
        sys.stdout.write(module.code)

    if args.depfile:
        depfile_path = Path(args.depfile)
        depfile_path.parent.mkdir(parents=True, exist_ok=True)
        depfile_path.write_text(format_depfile(args.output, [args.path, *module.dependencies()]), encoding="utf-8")

    return 0


if __name__ == "__main__":
    sys.exit(main())
