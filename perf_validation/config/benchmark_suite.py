"""
Benchmark suite definitions.

A suite groups benchmark tests under an importance weight (1-10). Each test
names a scenario type, field overrides for that scenario's configuration, and
the target/threshold pair used to judge each extracted metric.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from perf_validation.consts.ScenarioType import ScenarioType


@dataclass(frozen=True)
class MetricTarget:
    target: float
    threshold: float
    unit: str

    def to_dict(self) -> Dict[str, Any]:
        return {"target": self.target, "threshold": self.threshold, "unit": self.unit}


@dataclass(frozen=True)
class BenchmarkTest:
    name: str
    type: ScenarioType
    config: Dict[str, Any] = field(default_factory=dict)
    target_metrics: Dict[str, MetricTarget] = field(default_factory=dict)


@dataclass(frozen=True)
class BenchmarkSuite:
    name: str
    description: str
    tests: Tuple[BenchmarkTest, ...]
    weight: int = 10
    critical_path: bool = False

    def __post_init__(self):
        if not 1 <= self.weight <= 10:
            raise ValueError(f"Suite weight must be between 1 and 10, got {self.weight}")


def default_benchmark_suites() -> Tuple[BenchmarkSuite, ...]:
    """Return the default set of benchmark suites."""
    return (
        BenchmarkSuite(
            name="Core Performance",
            description="Essential performance benchmarks for simulation engine",
            weight=10,
            critical_path=True,
            tests=(
                BenchmarkTest(
                    name="Tick Consistency",
                    type=ScenarioType.TICK_CONSISTENCY,
                    config={"entity_count": 6, "measurement_ticks": 100},
                    target_metrics={
                        "averageTickTime": MetricTarget(50, 100, "ms"),
                        "maxTickTime": MetricTarget(100, 200, "ms"),
                        "consistency": MetricTarget(95, 80, "%"),
                        "variance": MetricTarget(10, 25, "ms"),
                    },
                ),
                BenchmarkTest(
                    name="Extended Performance",
                    type=ScenarioType.EXTENDED,
                    config={"duration_s": 5 * 60.0, "entity_counts": (4, 8)},
                    target_metrics={
                        "averageTickTime": MetricTarget(50, 100, "ms"),
                        "targetCompliance": MetricTarget(95, 80, "%"),
                        "memoryPeak": MetricTarget(400, 500, "MB"),
                    },
                ),
            ),
        ),
        BenchmarkSuite(
            name="Memory Management",
            description="Memory usage and leak detection benchmarks",
            weight=8,
            critical_path=True,
            tests=(
                BenchmarkTest(
                    name="Memory Validation",
                    type=ScenarioType.MEMORY,
                    config={"duration_s": 3 * 60.0},
                    target_metrics={
                        "memoryPassRate": MetricTarget(100, 80, "%"),
                        "baselineMemory": MetricTarget(150, 200, "MB"),
                        "peakMemory": MetricTarget(400, 500, "MB"),
                        "memoryLeaks": MetricTarget(0, 1, "count"),
                    },
                ),
            ),
        ),
        BenchmarkSuite(
            name="Scalability",
            description="Performance scaling characteristics with entity count",
            weight=7,
            critical_path=False,
            tests=(
                BenchmarkTest(
                    name="Entity Scalability",
                    type=ScenarioType.SCALABILITY,
                    config={"entity_counts": (4, 8, 12), "duration_s": 2 * 60.0},
                    target_metrics={
                        "optimalEntityCount": MetricTarget(8, 4, "entities"),
                        "linearityScore": MetricTarget(80, 60, "score"),
                        "efficiencyScore": MetricTarget(80, 60, "score"),
                        "breakingPoint": MetricTarget(20, 10, "entities"),
                    },
                ),
            ),
        ),
        BenchmarkSuite(
            name="System Integration",
            description="Combined load and system integration benchmarks",
            weight=6,
            critical_path=False,
            tests=(
                BenchmarkTest(
                    name="Combined Load",
                    type=ScenarioType.COMBINED_LOAD,
                    config={"duration_s": 3 * 60.0, "entity_count": 6},
                    target_metrics={
                        "stabilityRate": MetricTarget(100, 80, "%"),
                        "simulationPerformance": MetricTarget(80, 120, "ms"),
                        "uiPerformance": MetricTarget(150, 200, "ms"),
                    },
                ),
            ),
        ),
    )


@dataclass(frozen=True)
class BenchmarkSettings:
    baseline_version: str = "1.0.0"
    cooldown_s: float = 5.0
    baseline_dir: str = "baselines"
    # When false, suite tests keep the configured scenario durations
    use_suite_durations: bool = True
    suites: Tuple[BenchmarkSuite, ...] = field(default_factory=default_benchmark_suites)
