"""
Global release-gate targets used by the validation runner.

These are judged independently of each scenario's own thresholds.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PerformanceTargets:
    max_tick_time_ms: float = 100.0
    average_tick_time_ms: float = 50.0
    target_compliance_pct: float = 90.0


@dataclass(frozen=True)
class MemoryTargets:
    baseline_mb: float = 200.0
    peak_mb: float = 500.0


@dataclass(frozen=True)
class ScalabilityTargets:
    min_entity_count: int = 4
    optimal_entity_count: int = 8
    max_entity_count: int = 10


@dataclass(frozen=True)
class RegressionThresholds:
    performance_pct: float = 20.0
    memory_pct: float = 30.0
    stability_pct: float = 10.0


@dataclass(frozen=True)
class ValidationTargets:
    performance: PerformanceTargets = field(default_factory=PerformanceTargets)
    memory: MemoryTargets = field(default_factory=MemoryTargets)
    scalability: ScalabilityTargets = field(default_factory=ScalabilityTargets)
    regression: RegressionThresholds = field(default_factory=RegressionThresholds)
