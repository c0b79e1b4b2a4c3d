# src/logging/context.py - v1
"""Contextual logging support: attach generation_id, batch_id, kind and stage.

Context variables are copied into every asyncio task at creation time, so a
value set at the start of a generation follows it through its stages
without being visible to sibling generations.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_generation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "generation_id", default=None
)
_batch_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "batch_id", default=None
)
_kind: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "kind", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Snapshot of the current logging context."""

    generation_id: str | None = None
    batch_id: str | None = None
    kind: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        generation_id=_generation_id.get(),
        batch_id=_batch_id.get(),
        kind=_kind.get(),
        stage=_stage.get(),
    )


def set_generation_context(generation_id: str, kind: str | None = None) -> None:
    """Set generation-level context (called once per generation)."""
    _generation_id.set(generation_id)
    _kind.set(kind)


def set_batch_context(batch_id: str) -> None:
    _batch_id.set(batch_id)


def set_stage_context(stage: str | None) -> None:
    """Set the stage currently executing."""
    _stage.set(stage)


def clear_context() -> None:
    """Reset all context variables."""
    _generation_id.set(None)
    _batch_id.set(None)
    _kind.set(None)
    _stage.set(None)
