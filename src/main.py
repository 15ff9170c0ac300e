# src/main.py — v2
"""CLI entry point: changed, lint, roots commands.

Usage:
    incrlint changed              lint files changed in the project's git roots
    incrlint lint <files...>      lint an explicit target file list
    incrlint roots                list the git roots found via the project file
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from incrlint.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from incrlint.config.settings import ConfigurationError, load_settings
    from incrlint.logging.logger import setup_logging

    try:
        overrides: dict[str, object] = {}
        if args.work_directory is not None:
            overrides["work_directory"] = args.work_directory
        settings = load_settings(**overrides)
    except ConfigurationError as exc:
        setup_logging()
        logger.error("Invalid configuration: %s", exc)
        return 1

    setup_logging("DEBUG" if args.verbose else settings.log_level, settings.log_format)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="incrlint",
        description=f"incrlint v{__version__}: incremental lint for build targets",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "-w", "--work-directory", type=Path, default=None,
        help="Directory holding cache and output (default: INCRLINT_WORK_DIRECTORY or .incrlint)",
    )

    subparsers = parser.add_subparsers(dest="command")

    p_changed = subparsers.add_parser(
        "changed", help="Lint files changed under version control",
    )
    p_changed.set_defaults(func=_cmd_changed)

    p_lint = subparsers.add_parser(
        "lint", help="Lint an explicit list of target files",
    )
    p_lint.add_argument("files", nargs="+", type=Path, help="Target source files")
    p_lint.add_argument(
        "-t", "--target", default="Target",
        help="Target display name (default: Target)",
    )
    p_lint.add_argument(
        "--release", action="store_true",
        help="Treat the target as a release build (skips linting)",
    )
    p_lint.set_defaults(func=_cmd_lint)

    p_roots = subparsers.add_parser(
        "roots", help="Print git roots referenced by the project",
    )
    p_roots.set_defaults(func=_cmd_roots)

    return parser


async def _cmd_changed(args: argparse.Namespace, settings) -> int:
    from incrlint.pipeline.runner import run_changed_files

    result = await run_changed_files(settings)
    _print_result_summary(result)
    return 0


async def _cmd_lint(args: argparse.Namespace, settings) -> int:
    from incrlint.core.models import BuildFile, RealTarget
    from incrlint.pipeline.runner import run_target

    target = RealTarget(
        display_name=args.target,
        debug_build=not args.release,
        input_files=[BuildFile(path=str(f.resolve())) for f in args.files],
    )
    result = await run_target(settings, target)
    _print_result_summary(result)
    return 0


async def _cmd_roots(args: argparse.Namespace, settings) -> int:
    from incrlint.graph.descriptor import discover_git_roots, load_project_graph

    settings.require_standalone()
    graph = load_project_graph(settings)
    for root in discover_git_roots(graph, settings.repo_root):
        print(root)
    return 0


def _print_result_summary(result) -> None:
    if result.skipped_reason:
        logger.info("%s: skipped (%s)", result.target, result.skipped_reason)
        return
    plan = result.plan
    logger.info(
        "%s: %d reprocessed, %d carried over, %d cached diagnostics in %.2fs",
        result.target,
        len(plan.files_to_process),
        len(plan.carried_over),
        len(plan.cached_diagnostics),
        result.duration_seconds,
    )


if __name__ == "__main__":
    sys.exit(main())
