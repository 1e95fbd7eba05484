from dataclasses import dataclass, field

from perf_validation.config.analysis_policy import AnalysisPolicy
from perf_validation.config.benchmark_suite import BenchmarkSettings
from perf_validation.config.test_config import (
    CombinedLoadConfig,
    MemoryTestConfig,
    ScalabilityConfig,
    TestConfig,
    TickConsistencyConfig,
)
from perf_validation.config.validation_targets import ValidationTargets


@dataclass(frozen=True)
class HarnessConfig:
    """Everything a full validation run needs, as loaded from config_yaml/."""
    soak: TestConfig = field(default_factory=lambda: TestConfig(entity_counts=(4, 6, 8, 10)))
    memory: MemoryTestConfig = field(default_factory=MemoryTestConfig)
    scalability: ScalabilityConfig = field(
        default_factory=lambda: ScalabilityConfig(entity_counts=(4, 6, 8, 10, 12, 15))
    )
    combined_load: CombinedLoadConfig = field(default_factory=CombinedLoadConfig)
    tick_consistency: TickConsistencyConfig = field(default_factory=TickConsistencyConfig)
    policy: AnalysisPolicy = field(default_factory=AnalysisPolicy)
    validation: ValidationTargets = field(default_factory=ValidationTargets)
    benchmark: BenchmarkSettings = field(default_factory=BenchmarkSettings)
    output_dir: str = "results"
