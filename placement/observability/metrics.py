"""Placement metrics: labelled counters and latency histograms, kept in memory.

Series are named Prometheus-style, e.g. ``migrations_emitted{table_id="1"}`` or
``balance_pass_skipped{reason="cooldown",table_id="1"}``. Labels are limited to
the dimensions balancing has: table, group and skip reason.
"""

import threading
from typing import Any, Dict, Optional, Tuple

Labels = Tuple[Tuple[str, str], ...]


def _labels(**values: Optional[str]) -> Labels:
    return tuple(sorted((k, str(v)) for k, v in values.items() if v is not None))


def series_name(name: str, labels: Labels) -> str:
    if not labels:
        return name
    inner = ",".join(f'{key}="{value}"' for key, value in labels)
    return f"{name}{{{inner}}}"


class MetricsCollector:
    """
    Thread-safe in-memory registry. One collector may be shared by the balancers
    of several tables; the table_id label keeps their series apart.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: Dict[Tuple[str, Labels], float] = {}
        self._latencies: Dict[Tuple[str, Labels], list] = {}

    def increment(
        self,
        name: str,
        value: float = 1.0,
        *,
        table_id: Optional[str] = None,
        group: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        key = (name, _labels(table_id=table_id, group=group, reason=reason))
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + value

    def observe_latency(self, name: str, latency_ms: float, *, table_id: Optional[str] = None) -> None:
        key = (name, _labels(table_id=table_id))
        with self._lock:
            self._latencies.setdefault(key, []).append(latency_ms)

    def counter(self, name: str, **labels: str) -> float:
        """Sum of every series of name carrying at least the given labels."""
        wanted = set(_labels(**labels))
        with self._lock:
            return sum(
                value
                for (series, series_labels), value in self._counters.items()
                if series == name and wanted <= set(series_labels)
            )

    def export_metrics(self) -> Dict[str, Any]:
        """Snapshot of all series: counters by series name, histograms with count/sum/values."""
        with self._lock:
            return {
                "counters": {series_name(n, l): v for (n, l), v in self._counters.items()},
                "histograms": {
                    series_name(n, l): {"count": len(v), "sum": sum(v), "values": list(v)}
                    for (n, l), v in self._latencies.items()
                },
            }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._latencies.clear()
