from typing import List, Sequence

import numpy as np

from perf_validation.config.test_config import MB
from perf_validation.models.scenario_result import TickStats


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def std_dev(values: Sequence[float]) -> float:
    """Population standard deviation; 0 for an empty series"""
    if not values:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float)))


def to_mb(value_bytes: float) -> float:
    return value_bytes / MB


def calculate_tick_stats(tick_times: Sequence[float], target_ms: float) -> TickStats:
    """Calculate statistical summary of a tick-time series against a per-tick target"""
    if not tick_times:
        return TickStats()

    sorted_values = sorted(tick_times)
    n = len(sorted_values)
    compliant = sum(1 for t in sorted_values if t <= target_ms)

    return TickStats(
        average=sum(sorted_values) / n,
        median=sorted_values[n // 2],
        p95=sorted_values[min(int(n * 0.95), n - 1)],
        max=sorted_values[-1],
        min=sorted_values[0],
        std_dev=std_dev(sorted_values),
        target_compliance=compliant / n * 100,
        count=n,
    )


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson r; 0 when fewer than two points or either series is constant"""
    if len(x) != len(y) or len(x) < 2:
        return 0.0
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if np.std(xs) == 0 or np.std(ys) == 0:
        return 0.0
    return float(np.corrcoef(xs, ys)[0, 1])


def segment_means(values: Sequence[float], segments: int) -> List[float]:
    """
    Split values into `segments` contiguous chunks and return each chunk's mean.

    The last chunk absorbs the remainder. Needs at least `segments` values.
    """
    if segments < 1 or len(values) < segments:
        return []
    size = len(values) // segments
    means = []
    for i in range(segments):
        start = i * size
        end = len(values) if i == segments - 1 else (i + 1) * size
        means.append(mean(values[start:end]))
    return means


def half_split_ratio(values: Sequence[float]) -> float:
    """Mean of the second half divided by mean of the first half (1.0 if undefined)"""
    if len(values) < 2:
        return 1.0
    half = len(values) // 2
    first = mean(values[:half])
    if first == 0:
        return 1.0
    return mean(values[half:]) / first


def elapsed_minutes(start_ms: float, end_ms: float) -> float:
    return (end_ms - start_ms) / 60000.0
