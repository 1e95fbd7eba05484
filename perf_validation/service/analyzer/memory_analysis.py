"""
Memory Analysis Module

Turns a run's MemorySample series into baseline/peak/average, growth, leak and
pressure figures, and validates them against scenario thresholds. All functions
return neutral results on short or empty series.
"""
from typing import List, Sequence

from perf_validation.config.analysis_policy import AnalysisPolicy
from perf_validation.config.test_config import Thresholds
from perf_validation.consts.LeakSeverity import LeakSeverity
from perf_validation.models.memory_sample import MemorySample
from perf_validation.models.scenario_result import (
    MemoryAnalysis,
    MemoryGrowth,
    MemoryLeak,
    MemoryPressure,
    MemoryStats,
    MemoryValidation,
)
from perf_validation.util.cal_utils import elapsed_minutes, half_split_ratio, mean, segment_means, to_mb


def heap_values(samples: Sequence[MemorySample]) -> List[float]:
    return [s.heap_used for s in samples]


def memory_stats(samples: Sequence[MemorySample]) -> MemoryStats:
    if not samples:
        return MemoryStats()
    heap = heap_values(samples)
    return MemoryStats(baseline=min(heap), peak=max(heap), average=mean(heap))


def analyze_growth(samples: Sequence[MemorySample], policy: AnalysisPolicy) -> MemoryGrowth:
    n = len(samples)
    if n < policy.growth_min_samples:
        return MemoryGrowth()

    minutes = elapsed_minutes(samples[0].timestamp, samples[-1].timestamp)
    change_mb = to_mb(samples[-1].heap_used - samples[0].heap_used)
    linear = change_mb / minutes if minutes > 0 else 0.0

    heap = heap_values(samples)
    first_avg = mean(heap[:n // 4])
    last_avg = mean(heap[(n * 3) // 4:])

    return MemoryGrowth(
        linear_growth_mb_per_min=linear,
        exponential_growth=last_avg > first_avg * policy.exponential_growth_factor,
    )


def detect_leak(samples: Sequence[MemorySample], policy: AnalysisPolicy) -> MemoryLeak:
    """
    Flag a leak when segment means grow in at least `leak_min_growing_segments`
    of the consecutive segment comparisons; severity by growth rate in MB/min.
    """
    if len(samples) < policy.leak_min_samples:
        return MemoryLeak()

    segments = segment_means(heap_values(samples), policy.leak_segments)
    growing = sum(1 for prev, cur in zip(segments, segments[1:]) if cur > prev)
    if growing < policy.leak_min_growing_segments:
        return MemoryLeak()

    minutes = elapsed_minutes(samples[0].timestamp, samples[-1].timestamp)
    rate = to_mb(segments[-1] - segments[0]) / minutes if minutes > 0 else 0.0

    if rate > policy.leak_critical_mb_per_min:
        severity = LeakSeverity.CRITICAL
    elif rate > policy.leak_major_mb_per_min:
        severity = LeakSeverity.MAJOR
    elif rate > policy.leak_minor_mb_per_min:
        severity = LeakSeverity.MINOR
    else:
        severity = LeakSeverity.NONE

    return MemoryLeak(detected=True, severity=severity, growth_rate_mb_per_min=rate)


def analyze_pressure(samples: Sequence[MemorySample], thresholds: Thresholds,
                     policy: AnalysisPolicy) -> MemoryPressure:
    if not samples:
        return MemoryPressure()

    baseline = thresholds.baseline_memory_bytes
    peak = thresholds.peak_memory_bytes
    n = len(samples)

    longest = current = 0
    for s in samples:
        if s.heap_used > baseline:
            current += 1
            longest = max(longest, current)
        else:
            current = 0

    return MemoryPressure(
        time_above_baseline_pct=sum(1 for s in samples if s.heap_used > baseline) / n * 100,
        time_above_peak_pct=sum(1 for s in samples if s.heap_used > peak) / n * 100,
        sustained_pressure=longest > n * policy.sustained_pressure_fraction,
    )


def analyze_memory(samples: Sequence[MemorySample], thresholds: Thresholds,
                   policy: AnalysisPolicy) -> MemoryAnalysis:
    if not samples:
        return MemoryAnalysis()

    stats = memory_stats(samples)
    return MemoryAnalysis(
        baseline=stats.baseline,
        peak=stats.peak,
        average=stats.average,
        growth=analyze_growth(samples, policy),
        leak=detect_leak(samples, policy),
        pressure=analyze_pressure(samples, thresholds, policy),
    )


def validate_memory(analysis: MemoryAnalysis, thresholds: Thresholds) -> MemoryValidation:
    baseline_ok = analysis.baseline <= thresholds.baseline_memory_bytes
    peak_ok = analysis.peak <= thresholds.peak_memory_bytes
    no_leaks = not analysis.leak.detected or analysis.leak.severity == LeakSeverity.NONE
    stable = not analysis.growth.exponential_growth and not analysis.pressure.sustained_pressure

    issues = []
    recommendations = []

    if not baseline_ok:
        issues.append(
            f"Baseline memory usage ({to_mb(analysis.baseline):.2f}MB) exceeds threshold "
            f"({thresholds.baseline_memory_mb:.2f}MB)"
        )
        recommendations.append("Optimize memory allocation and data structures")

    if not peak_ok:
        issues.append(
            f"Peak memory usage ({to_mb(analysis.peak):.2f}MB) exceeds threshold "
            f"({thresholds.peak_memory_mb:.2f}MB)"
        )
        recommendations.append("Implement memory pooling and limit concurrent operations")

    if not no_leaks:
        issues.append(
            f"Memory leak detected with {analysis.leak.severity.value} severity "
            f"({analysis.leak.growth_rate_mb_per_min or 0.0:.2f} MB/min)"
        )
        recommendations.append("Review object lifecycle management and event listener cleanup")

    if analysis.growth.exponential_growth:
        issues.append("Exponential memory growth detected")
        recommendations.append("Implement garbage collection triggers and memory limits")

    if analysis.pressure.sustained_pressure:
        issues.append("Sustained memory pressure detected")
        recommendations.append("Optimize data retention policies and implement memory cleanup routines")

    return MemoryValidation(
        baseline_compliance=baseline_ok,
        peak_compliance=peak_ok,
        no_memory_leaks=no_leaks,
        stable_operation=stable,
        overall_pass=baseline_ok and peak_ok and no_leaks and stable,
        issues=issues,
        recommendations=recommendations,
    )


def half_split_leak(samples: Sequence[MemorySample], ratio: float, min_samples: int) -> bool:
    """True when the second half of the series averages more than `ratio` times the first"""
    if len(samples) < min_samples:
        return False
    return half_split_ratio(heap_values(samples)) > ratio
