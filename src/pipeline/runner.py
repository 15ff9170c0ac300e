# src/pipeline/runner.py — v1
"""Run orchestration: from a target (or from git changes) to committed state.

Pipeline per target::

    source files -> stat -> load cache + prior output -> plan -> execute

Standalone mode adds the front half: project descriptor -> git roots ->
changed files -> synthetic target.
"""

from __future__ import annotations

import logging
import os
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel

from incrlint.cache.json_store import JsonCacheStore
from incrlint.cache.project_cache import cached_git_roots
from incrlint.config.settings import Settings
from incrlint.core.models import RealTarget, SourceFile, SyntheticTarget, Target, TargetKind
from incrlint.graph.descriptor import discover_git_roots, load_project_graph
from incrlint.logging.context import clear_context, set_run_context
from incrlint.pipeline.planner import BuildCommandPlanner, BuildPlan
from incrlint.process.executor import ProcessExecutor, locate_tool
from incrlint.vcs.change_detector import ChangeDetector, locate_git

logger = logging.getLogger(__name__)

PRODUCTS_DIRECTORY = "Products"


class RunResult(BaseModel):
    """Summary of one target run."""

    target: str
    run_id: str
    plan: BuildPlan | None = None
    skipped_reason: str | None = None
    duration_seconds: float = 0.0


def generate_run_id(timestamp: datetime | None = None) -> str:
    """Generate a run_id: yyyymmdd_hhmmss_{uuid4_short}."""
    ts = timestamp or datetime.now(timezone.utc)
    return f"{ts.strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:6]}"


def find_config_directory(start: Path, config_filename: str) -> Path | None:
    """First of ``start`` and its parents holding a readable ``config_filename``."""
    for directory in (start, *start.parents):
        if os.access(directory / config_filename, os.R_OK):
            return directory
    return None


def is_clean_build(build_dir: Path | None) -> bool:
    """A build directory without a Products entry means the build was cleaned."""
    if build_dir is None:
        return False
    try:
        return PRODUCTS_DIRECTORY not in os.listdir(build_dir)
    except OSError:
        return False


def collect_source_files(paths: list[str]) -> list[SourceFile]:
    """Stat ``paths``; files deleted since discovery are left out."""
    sources: list[SourceFile] = []
    for path in paths:
        try:
            sources.append(SourceFile.from_path(path))
        except FileNotFoundError:
            logger.debug("Skipping vanished file %s", path)
    return sources


async def run_target(
    settings: Settings,
    target: Target,
    *,
    tool: str | None = None,
    store: JsonCacheStore | None = None,
    executor: ProcessExecutor | None = None,
) -> RunResult:
    """Incrementally lint ``target`` and commit the new state.

    Raises:
        ConfigurationError: If the analysis tool cannot be located.
        CommandFailedError, UndecodableOutputError: If a planned command
            fails. Nothing is committed in that case.
    """
    start = time.monotonic()
    run_id = generate_run_id()
    result = RunResult(target=target.display_name, run_id=run_id)

    if not settings.enabled:
        result.skipped_reason = "disabled"
        return result
    if (
        isinstance(target, RealTarget)
        and not target.debug_build
        and target.kind != TargetKind.TEST
    ):
        logger.info("%s: Skipping for RELEASE build", target.display_name)
        result.skipped_reason = "release build"
        return result

    set_run_context(target.display_name, run_id)
    try:
        inputs = target.source_files(settings.source_suffix)
        if not inputs:
            logger.info("No input files")
            result.skipped_reason = "no input files"
            return result

        store = store or JsonCacheStore(settings.work_directory)
        if is_clean_build(settings.clean_build_dir):
            logger.info("Clean Build")
            store.clear()

        cache, prior_output = store.load_state()
        tool = tool or locate_tool(settings)
        project_dir = settings.project_dir or Path.cwd()
        working_directory = (
            find_config_directory(project_dir, settings.tool_config_filename)
            or project_dir
        )

        planner = BuildCommandPlanner(settings, store, tool, working_directory)
        plan = planner.plan(
            target.display_name,
            collect_source_files(inputs),
            cache,
            prior_output,
        )

        executor = executor or ProcessExecutor(store)
        await executor.execute(plan.commands)

        result.plan = plan
        result.duration_seconds = time.monotonic() - start
        return result
    finally:
        clear_context()


async def detect_changed_target(settings: Settings) -> SyntheticTarget:
    """Build a synthetic target from files changed in the project's git roots.

    Raises:
        ConfigurationError: If standalone preconditions are not met.
        DescriptorDecodeError, ChangeDetectionError: On descriptor or git
            failures.
    """
    settings.require_standalone()
    start = time.monotonic()

    def discover() -> list[str]:
        return discover_git_roots(load_project_graph(settings), settings.repo_root)

    roots = cached_git_roots(
        settings.work_directory,
        settings.pbxproj_path,  # type: ignore[arg-type]
        discover,
    )
    detector = ChangeDetector(
        git=locate_git(settings.work_directory),
        policy=settings.root_failure_policy,
    )
    changes = await detector.detect(roots)
    logger.info("Change detection took %.2fs", time.monotonic() - start)
    return SyntheticTarget.from_paths("Target", changes.files)


async def run_changed_files(settings: Settings) -> RunResult:
    """Standalone mode: lint whatever git reports as changed."""
    target = await detect_changed_target(settings)
    return await run_target(settings, target)
