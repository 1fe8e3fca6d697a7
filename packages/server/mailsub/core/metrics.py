"""
In-process metrics with Prometheus text exposition.

Counters are fed by the policy observability hooks; ``GET /metrics`` renders them
as Prometheus text, or as JSON with ``?format=json``.
"""

from __future__ import annotations

import time
from collections import defaultdict
from typing import Any

PREFIX = "mailsub_"


class MetricsCollector:
    """Counters for policy operations, exportable as Prometheus text or JSON."""

    def __init__(self) -> None:
        self._counters: dict[str, int] = defaultdict(int)
        self._start_time = time.time()

    def inc(self, name: str, value: int = 1) -> None:
        """Increment a counter."""
        self._counters[f"{PREFIX}{name}"] += value

    def get(self, name: str) -> int:
        """Get a counter value (0 for counters never incremented)."""
        return self._counters.get(f"{PREFIX}{name}", 0)

    def reset(self) -> None:
        self._counters.clear()
        self._start_time = time.time()

    def to_prometheus(self) -> str:
        """Export all metrics in Prometheus text format."""
        lines = []
        for name, value in sorted(self._counters.items()):
            lines.append(f"# TYPE {name} counter")
            lines.append(f"{name} {value}")
        lines.append(f"# TYPE {PREFIX}uptime_seconds gauge")
        lines.append(f"{PREFIX}uptime_seconds {self.uptime():.1f}")
        return "\n".join(lines) + "\n"

    def uptime(self) -> float:
        return time.time() - self._start_time

    def to_dict(self) -> dict[str, Any]:
        """Counters plus uptime, for the JSON form of the metrics endpoint."""
        return {
            "counters": dict(sorted(self._counters.items())),
            "uptime_seconds": round(self.uptime(), 1),
        }


metrics = MetricsCollector()
