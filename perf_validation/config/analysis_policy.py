"""
Tunable analysis thresholds.

These values are heuristics pending calibration against real measurements, so
they are kept as policy parameters rather than constants in the analyzer.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalysisPolicy:
    # Memory growth / leak detection
    growth_min_samples: int = 10
    exponential_growth_factor: float = 2.0
    leak_min_samples: int = 20
    leak_segments: int = 4
    leak_min_growing_segments: int = 3
    leak_critical_mb_per_min: float = 50.0
    leak_major_mb_per_min: float = 20.0
    leak_minor_mb_per_min: float = 5.0
    sustained_pressure_fraction: float = 0.3

    # Half-split growth checks (second half mean vs first half mean)
    soak_leak_growth_ratio: float = 1.2
    load_leak_growth_ratio: float = 1.3

    # Scalability
    optimal_min_compliance_pct: float = 90.0
    breaking_compliance_pct: float = 70.0
    breaking_tick_factor: float = 2.0
    correlation_excellent: float = 0.9
    correlation_good: float = 0.7
    correlation_acceptable: float = 0.5
    exponential_step_ratio: float = 1.5
    bottleneck_growth_factor: float = 1.5
    predictive_correlation: float = 0.7

    # Combined-load stability verdicts
    stable_compliance_pct: float = 80.0
    stable_tick_stddev_ms: float = 50.0
    responsive_avg_ms: float = 200.0
    responsive_ratio: float = 0.9
    stable_memory_peak_mb: float = 500.0

    # Combined-load bottleneck rules
    bottleneck_tick_ms: float = 100.0
    bottleneck_compliance_pct: float = 80.0
    bottleneck_ui_avg_ms: float = 200.0
    bottleneck_unresponsive_ratio: float = 0.2
    bottleneck_cpu_pct: float = 80.0
    bottleneck_memory_mb: float = 400.0
    # Upper bounds (inclusive) of the issue count for minor / moderate severity
    severity_minor_max: int = 2
    severity_moderate_max: int = 4
