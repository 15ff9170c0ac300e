# src/logging/context.py — v2
"""Contextual logging support: attach target and run_id to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_target: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "target", default=None
)
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    target: str | None = None
    run_id: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    return LogContext(
        target=_target.get(),
        run_id=_run_id.get(),
        stage=_stage.get(),
    )


def set_run_context(target: str, run_id: str) -> None:
    """Set run-level context (called once per target run)."""
    _target.set(target)
    _run_id.set(run_id)


def set_stage(stage: str | None) -> None:
    """Set the pipeline stage currently executing (plan, fix, lint, ...)."""
    _stage.set(stage)


def clear_context() -> None:
    _target.set(None)
    _run_id.set(None)
    _stage.set(None)
