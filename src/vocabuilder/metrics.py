"""In-memory request and domain-outcome counters exposed at `/metrics`.

パス別のレイテンシ（p95）とステータス分類に加えて、翻訳結果（ok/superseded/
エラーコード別）とストア破損の検出回数を数える。プロセス再起動で消える。
"""

from __future__ import annotations

import threading
from collections import Counter, defaultdict, deque
from dataclasses import dataclass, field
from typing import Deque, Dict

# ステータス → 分類名。該当しないものは 4xx/5xx で判定する
_STATUS_BUCKETS = {
    409: "storage_refusals",
    502: "provider_failures",
}


@dataclass
class PathStats:
    latencies_ms: Deque[float]
    total: int = 0
    rejected: int = 0
    errors: int = 0
    outcomes: Counter = field(default_factory=Counter)


def classify_status(status: int | None) -> str | None:
    """Return the counter bucket for a response status (None for 2xx/3xx)."""

    if status is None:
        return "errors"
    if status in _STATUS_BUCKETS:
        return _STATUS_BUCKETS[status]
    if status >= 500:
        return "errors"
    if status >= 400:
        return "rejected"
    return None


class MetricsRegistry:
    """Per-path latency window plus vocabulary-specific outcome counters."""

    def __init__(self, window_size: int = 200) -> None:
        self._window_size = window_size
        self._lock = threading.Lock()
        self._per_path: Dict[str, PathStats] = defaultdict(
            lambda: PathStats(latencies_ms=deque(maxlen=self._window_size))
        )
        self._translations: Counter = Counter()
        self._corruptions: Counter = Counter()

    def record(self, path: str, latency_ms: float, *, status: int | None) -> None:
        bucket = classify_status(status)
        with self._lock:
            stats = self._per_path[path]
            stats.latencies_ms.append(latency_ms)
            stats.total += 1
            if bucket == "errors":
                stats.errors += 1
            elif bucket == "rejected":
                stats.rejected += 1
            elif bucket is not None:
                stats.outcomes[bucket] += 1

    def record_translation(self, outcome: str) -> None:
        """Count a translate outcome: "ok", "superseded" or an error code value."""

        with self._lock:
            self._translations[outcome] += 1

    def record_corruption(self, storage_key: str) -> None:
        with self._lock:
            self._corruptions[storage_key] += 1

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            paths: Dict[str, Dict[str, float | int]] = {}
            for path, stats in self._per_path.items():
                p95 = calculate_p95(list(stats.latencies_ms))
                paths[path] = {
                    "p95_ms": round(p95, 2),
                    "count": stats.total,
                    "rejected": stats.rejected,
                    "errors": stats.errors,
                    "storage_refusals": stats.outcomes["storage_refusals"],
                    "provider_failures": stats.outcomes["provider_failures"],
                }
            return {
                "paths": paths,
                "translations": dict(self._translations),
                "storage_corruptions": dict(self._corruptions),
            }


def calculate_p95(values: list[float]) -> float:
    if not values:
        return 0.0
    sorted_vals = sorted(values)
    k = int(0.95 * (len(sorted_vals) - 1))
    return sorted_vals[k]


registry = MetricsRegistry()
