"""Scenario result data models."""

from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from perf_validation.consts.BottleneckSeverity import BottleneckSeverity
from perf_validation.consts.LeakSeverity import LeakSeverity
from perf_validation.consts.ScenarioState import ScenarioState
from perf_validation.models.memory_sample import MemorySample
from perf_validation.models.serialization import enum_dict_factory


def _now() -> str:
    return datetime.now().isoformat()


@dataclass
class TickStats:
    """Statistical summary of a tick-time series (all values in ms)"""
    average: float = 0.0
    median: float = 0.0
    p95: float = 0.0
    max: float = 0.0
    min: float = 0.0
    std_dev: float = 0.0
    target_compliance: float = 0.0  # % of ticks at or under the target
    count: int = 0


@dataclass
class MemoryStats:
    """Heap usage summary in bytes"""
    baseline: float = 0.0
    peak: float = 0.0
    average: float = 0.0


# ---------------------------------------------------------------- soak

@dataclass
class SoakStability:
    degradation_events: int
    performance_warnings: int
    performance_critical: int
    memory_leak_detected: bool


@dataclass
class SoakResult:
    """
    Result of one soak run at a fixed entity count.

    `performance.std_dev` is reported as the tick time variance in summaries.
    """
    test_name: str
    entity_count: int
    duration_s: float
    total_ticks: int
    performance: TickStats
    memory: MemoryStats
    stability: SoakStability
    passed: bool
    seed: int
    # ticks that left the collaborator window unmeasured
    lost_ticks: int = 0
    samples: List[MemorySample] = field(default_factory=list)
    tick_times: List[float] = field(default_factory=list)
    timestamp: str = field(default_factory=_now)

    def to_dict(self, include_series: bool = True) -> Dict[str, Any]:
        data = asdict(self, dict_factory=enum_dict_factory)
        if not include_series:
            data.pop("samples")
            data.pop("tick_times")
        return data


# -------------------------------------------------------------- memory

@dataclass
class MemoryGrowth:
    linear_growth_mb_per_min: float = 0.0
    exponential_growth: bool = False


@dataclass
class MemoryLeak:
    detected: bool = False
    severity: LeakSeverity = LeakSeverity.NONE
    growth_rate_mb_per_min: Optional[float] = None


@dataclass
class MemoryPressure:
    time_above_baseline_pct: float = 0.0
    time_above_peak_pct: float = 0.0
    sustained_pressure: bool = False


@dataclass
class MemoryAnalysis:
    baseline: float = 0.0
    peak: float = 0.0
    average: float = 0.0
    growth: MemoryGrowth = field(default_factory=MemoryGrowth)
    leak: MemoryLeak = field(default_factory=MemoryLeak)
    pressure: MemoryPressure = field(default_factory=MemoryPressure)


@dataclass
class MemoryValidation:
    baseline_compliance: bool
    peak_compliance: bool
    no_memory_leaks: bool
    stable_operation: bool
    overall_pass: bool
    issues: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


@dataclass
class MemoryTestResult:
    test_name: str
    variant: str
    duration_s: float
    analysis: MemoryAnalysis
    validation: MemoryValidation
    seed: int
    samples: List[MemorySample] = field(default_factory=list)
    timestamp: str = field(default_factory=_now)

    def to_dict(self, include_series: bool = True) -> Dict[str, Any]:
        data = asdict(self, dict_factory=enum_dict_factory)
        if not include_series:
            data.pop("samples")
        return data


# --------------------------------------------------------- scalability

@dataclass
class Throughput:
    ticks_per_second: float = 0.0
    entities_per_second: float = 0.0


@dataclass
class ScalingScores:
    linearity_score: float = 100.0
    efficiency_score: float = 100.0
    degradation_from_baseline: float = 0.0


@dataclass
class ScalabilityMemory:
    peak_usage: float = 0.0
    average_usage: float = 0.0
    memory_per_entity: float = 0.0


@dataclass
class ScalabilityRunResult:
    entity_count: int
    performance: TickStats
    throughput: Throughput
    scalability: ScalingScores
    memory: ScalabilityMemory
    seed: int
    lost_ticks: int = 0
    tick_times: List[float] = field(default_factory=list)
    timestamp: str = field(default_factory=_now)

    def to_dict(self, include_series: bool = True) -> Dict[str, Any]:
        data = asdict(self, dict_factory=enum_dict_factory)
        if not include_series:
            data.pop("tick_times")
        return data


@dataclass
class ScalingCharacteristics:
    pattern: str  # linear | logarithmic | exponential | irregular
    efficiency: str  # excellent | good | acceptable | poor
    recommendation: str


@dataclass
class PerformanceCorrelation:
    entity_count_correlation: float
    memory_correlation: float
    predictive: bool


@dataclass
class ResourceBottlenecks:
    cpu: bool
    memory: bool
    subsystems: List[str] = field(default_factory=list)


@dataclass
class ScalabilityAnalysis:
    optimal_entity_count: int
    breaking_point: Optional[int]
    scaling_characteristics: ScalingCharacteristics
    performance_correlation: PerformanceCorrelation
    resource_bottlenecks: ResourceBottlenecks

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self, dict_factory=enum_dict_factory)


@dataclass
class ScalabilityResult:
    results: List[ScalabilityRunResult]
    analysis: Optional[ScalabilityAnalysis]

    def to_dict(self, include_series: bool = True) -> Dict[str, Any]:
        return {
            "results": [r.to_dict(include_series) for r in self.results],
            "analysis": self.analysis.to_dict() if self.analysis else None,
        }


# -------------------------------------------------------- combined load

@dataclass
class UiOperation:
    type: str
    duration_ms: float
    timestamp: float  # ms since scenario start
    responsive: bool
    resource_intensive: bool = False


@dataclass
class SimulationLoadMetrics:
    average_tick_time: float = 0.0
    tick_time_variance: float = 0.0  # standard deviation, ms
    target_compliance: float = 0.0
    degradation_events: int = 0


@dataclass
class UiMetrics:
    average_response_time: float = 0.0
    max_response_time: float = 0.0
    responsive_operations: int = 0
    unresponsive_operations: int = 0


@dataclass
class SystemMetrics:
    cpu_usage: List[float] = field(default_factory=list)
    memory_usage: List[float] = field(default_factory=list)
    memory_peak: float = 0.0

    @property
    def average_cpu(self) -> float:
        return sum(self.cpu_usage) / len(self.cpu_usage) if self.cpu_usage else 0.0


@dataclass
class LoadStability:
    simulation_stable: bool
    ui_responsive: bool
    memory_stable: bool
    no_resource_leaks: bool
    overall_stable: bool


@dataclass
class Bottlenecks:
    identified: List[str] = field(default_factory=list)
    severity: BottleneckSeverity = BottleneckSeverity.NONE
    recommendations: List[str] = field(default_factory=list)


@dataclass
class CombinedLoadResult:
    test_name: str
    scenario_name: str
    window_count: int
    duration_s: float
    simulation: SimulationLoadMetrics
    ui: UiMetrics
    system: SystemMetrics
    stability: LoadStability
    bottlenecks: Bottlenecks
    seed: int
    operations: List[UiOperation] = field(default_factory=list)
    timestamp: str = field(default_factory=_now)

    def to_dict(self, include_series: bool = True) -> Dict[str, Any]:
        data = asdict(self, dict_factory=enum_dict_factory)
        if not include_series:
            data.pop("operations")
            data["system"].pop("cpu_usage")
            data["system"].pop("memory_usage")
        return data


# ------------------------------------------------------ tick consistency

@dataclass
class TickConsistencyResult:
    entity_count: int
    target_ticks: int
    stats: TickStats
    seed: int
    lost_ticks: int = 0
    tick_times: List[float] = field(default_factory=list)
    timestamp: str = field(default_factory=_now)

    def to_dict(self, include_series: bool = True) -> Dict[str, Any]:
        data = asdict(self, dict_factory=enum_dict_factory)
        if not include_series:
            data.pop("tick_times")
        return data


@dataclass
class ScenarioFailure:
    """A run that ended in the Failed state"""
    run_name: str
    error: str
    state: ScenarioState
    timed_out: bool = False
    timestamp: str = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self, dict_factory=enum_dict_factory)
