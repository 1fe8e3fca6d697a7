"""
Observability hooks around the policy boundary.

Service coroutines are wrapped with ``observed``; after every call each
registered hook receives an ``OperationRecord``. Hooks only watch: the wrapped
call's result or exception reaches the caller untouched.
"""

from __future__ import annotations

import functools
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import structlog

from mailsub.core.metrics import MetricsCollector, metrics

log = structlog.get_logger()


@dataclass(frozen=True)
class OperationRecord:
    operation: str
    outcome: Optional[str]
    duration_ms: float
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


Hook = Callable[[OperationRecord], None]

_hooks: list[Hook] = []


def register_hook(hook: Hook) -> None:
    if hook not in _hooks:
        _hooks.append(hook)


def clear_hooks() -> None:
    _hooks.clear()


def _emit(record: OperationRecord) -> None:
    for hook in list(_hooks):
        try:
            hook(record)
        except Exception:
            log.exception("observability.hook_failed", operation=record.operation)


def observed(
    operation: str,
    outcome: Optional[Callable[[Any], Optional[str]]] = None,
):
    """Decorate an async policy function so hooks see each call.

    ``outcome`` maps the return value to a short label (``created``,
    ``not_found`` ...). Without it the outcome is ``ok``.
    """

    def decorator(func: Callable[..., Awaitable[Any]]):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as exc:
                _emit(OperationRecord(
                    operation=operation,
                    outcome="error",
                    duration_ms=(time.perf_counter() - start) * 1000,
                    error=exc,
                ))
                raise
            _emit(OperationRecord(
                operation=operation,
                outcome=outcome(result) if outcome else "ok",
                duration_ms=(time.perf_counter() - start) * 1000,
            ))
            return result

        return wrapper

    return decorator


# ---------------------------------------------------------------------------
# Built-in hooks
# ---------------------------------------------------------------------------

def log_hook(record: OperationRecord) -> None:
    """Log each policy call as a structured event named after the operation."""
    if record.ok:
        log.info(record.operation, outcome=record.outcome, duration_ms=round(record.duration_ms, 2))
    else:
        log.warning(
            record.operation,
            outcome=record.outcome,
            duration_ms=round(record.duration_ms, 2),
            error=repr(record.error),
        )


def make_metrics_hook(collector: MetricsCollector = metrics) -> Hook:
    """Build a hook counting calls, outcomes and errors per operation."""

    def metrics_hook(record: OperationRecord) -> None:
        name = record.operation.replace(".", "_")
        collector.inc(f"{name}_total")
        if record.ok:
            collector.inc(f"{name}_{record.outcome}_total")
        else:
            collector.inc(f"{name}_errors_total")

    return metrics_hook


# Label helpers for common return shapes.

def found_or_not(result: Any) -> str:
    return "not_found" if result is None else "found"


def deleted_or_not(result: bool) -> str:
    return "deleted" if result else "not_found"


def row_count(result: list) -> str:
    return "empty" if not result else "rows"
