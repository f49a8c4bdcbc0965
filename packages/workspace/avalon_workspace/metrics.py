"""
In-process counters for session and storage health.

Counters used by the workspace:
- logins_total / login_failures_total / logouts_total
- audit_write_failures_total
- persistence_failures_total
"""

from __future__ import annotations

from collections import defaultdict


class MetricsCollector:
    """Simple counter collector."""

    def __init__(self) -> None:
        self._counters: dict[str, int] = defaultdict(int)

    def inc(self, name: str, value: int = 1) -> None:
        """Increment a counter."""
        self._counters[f"workspace_{name}"] += value

    def get(self, name: str) -> int:
        return self._counters.get(f"workspace_{name}", 0)
