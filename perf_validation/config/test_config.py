"""
Scenario configuration data classes.

Every scenario runner receives one of these frozen configurations; they cannot
change once a scenario has started.
"""

from dataclasses import dataclass, field
from typing import Tuple

from perf_validation.consts.Complexity import Complexity

MB = 1024 * 1024


@dataclass(frozen=True)
class Thresholds:
    """Scenario-local pass/fail thresholds."""

    max_tick_time_ms: float = 100.0
    average_tick_time_ms: float = 50.0
    min_compliance_pct: float = 90.0
    baseline_memory_mb: float = 200.0
    peak_memory_mb: float = 500.0

    @property
    def baseline_memory_bytes(self) -> float:
        return self.baseline_memory_mb * MB

    @property
    def peak_memory_bytes(self) -> float:
        return self.peak_memory_mb * MB


@dataclass(frozen=True)
class TestConfig:
    """Common settings shared by all scenario runners."""

    __test__ = False

    thresholds: Thresholds = field(default_factory=Thresholds)
    duration_s: float = 30 * 60.0
    entity_counts: Tuple[int, ...] = (4, 6, 8, 10, 12)
    sampling_interval_s: float = 5.0
    cooldown_s: float = 5.0
    seed: int = 42
    # Extra wall-clock time allowed past the nominal duration before teardown is forced
    timeout_grace_s: float = 30.0
    # Seconds between simulation ticks for the built-in synthetic collaborator
    tick_interval_s: float = 1.0


@dataclass(frozen=True)
class MemoryTestConfig(TestConfig):
    duration_s: float = 10 * 60.0
    sampling_interval_s: float = 2.0
    gc_interval_s: float = 30.0
    entity_growth_rate: float = 0.1
    growth_interval_s: float = 60.0
    growth_cap: int = 16
    static_entity_count: int = 8
    dynamic_start_count: int = 4
    stress_entity_count: int = 20
    leak_entity_count: int = 6


@dataclass(frozen=True)
class ScalabilityConfig(TestConfig):
    entity_counts: Tuple[int, ...] = (2, 4, 6, 8, 10, 12, 15, 18, 20, 25)
    # Upper bound on wall-clock time for a single entity count
    duration_s: float = 2 * 60.0
    cooldown_s: float = 3.0
    warmup_ticks: int = 10
    measurement_ticks: int = 100
    performance_target_ms: float = 100.0
    poll_interval_s: float = 0.01
    scalability_threshold_pct: float = 50.0
    early_stop_factor: float = 3.0


@dataclass(frozen=True)
class WindowType:
    type: str
    update_frequency: float  # updates per second
    data_complexity: Complexity = Complexity.MEDIUM
    memory_footprint_mb: float = 50.0


@dataclass(frozen=True)
class Operation:
    type: str
    frequency: float  # operations per second
    duration_ms: float
    resource_intensive: bool = False


@dataclass(frozen=True)
class WindowScenario:
    name: str
    window_count: int
    window_types: Tuple[WindowType, ...]
    simultaneous_operations: Tuple[Operation, ...] = ()


def default_window_scenarios() -> Tuple[WindowScenario, ...]:
    return (
        WindowScenario(
            name="Single Main Window",
            window_count=1,
            window_types=(WindowType("main", 2, Complexity.MEDIUM, 50),),
            simultaneous_operations=(Operation("data_refresh", 0.5, 100, False),),
        ),
        WindowScenario(
            name="Dual Window Setup",
            window_count=2,
            window_types=(
                WindowType("main", 2, Complexity.MEDIUM, 50),
                WindowType("analytics", 1, Complexity.HIGH, 80),
            ),
            simultaneous_operations=(
                Operation("data_refresh", 1, 150, True),
                Operation("policy_analysis", 0.2, 500, True),
            ),
        ),
        WindowScenario(
            name="Multi-Window Heavy Load",
            window_count=4,
            window_types=(
                WindowType("main", 3, Complexity.MEDIUM, 50),
                WindowType("analytics", 2, Complexity.HIGH, 80),
                WindowType("entity_detail", 1, Complexity.MEDIUM, 40),
                WindowType("policy_editor", 0.5, Complexity.HIGH, 60),
            ),
            simultaneous_operations=(
                Operation("data_refresh", 2, 200, True),
                Operation("entity_creation", 0.1, 800, True),
                Operation("file_io", 0.5, 300, False),
            ),
        ),
    )


@dataclass(frozen=True)
class CombinedLoadConfig(TestConfig):
    duration_s: float = 5 * 60.0
    sampling_interval_s: float = 2.0
    cooldown_s: float = 10.0
    entity_count: int = 8
    window_scenarios: Tuple[WindowScenario, ...] = field(default_factory=default_window_scenarios)
    ui_interaction_rate: int = 2  # modeled interactions per second
    tick_target_ms: float = 100.0
    responsive_threshold_ms: float = 200.0


@dataclass(frozen=True)
class TickConsistencyConfig(TestConfig):
    duration_s: float = 5 * 60.0
    entity_count: int = 6
    measurement_ticks: int = 100
    poll_interval_s: float = 0.01
