"""
Turn raw scenario output into named, judged benchmark metrics.

Each extractor returns an empty dict when the scenario produced nothing.
"""
from typing import Callable, Dict, List, Optional

from perf_validation.config.benchmark_suite import BenchmarkTest
from perf_validation.consts.ScenarioType import ScenarioType
from perf_validation.models.metric import Metric
from perf_validation.models.scenario_result import (
    CombinedLoadResult,
    MemoryTestResult,
    ScalabilityResult,
    SoakResult,
    TickConsistencyResult,
)
from perf_validation.service.analyzer.scoring import create_metric
from perf_validation.util.cal_utils import mean, to_mb

Metrics = Dict[str, Metric]


def extract_extended_metrics(raw: List[SoakResult], test: BenchmarkTest) -> Metrics:
    if not raw:
        return {}
    t = test.target_metrics
    return {
        "averageTickTime": create_metric(mean([r.performance.average for r in raw]), "ms", t.get("averageTickTime")),
        "targetCompliance": create_metric(mean([r.performance.target_compliance for r in raw]), "%",
                                          t.get("targetCompliance")),
        "memoryPeak": create_metric(to_mb(mean([r.memory.peak for r in raw])), "MB", t.get("memoryPeak")),
    }


def extract_memory_metrics(raw: List[MemoryTestResult], test: BenchmarkTest) -> Metrics:
    if not raw:
        return {}
    t = test.target_metrics
    passed = sum(1 for r in raw if r.validation.overall_pass)
    leaks = sum(1 for r in raw if r.analysis.leak.detected)
    return {
        "memoryPassRate": create_metric(passed / len(raw) * 100, "%", t.get("memoryPassRate")),
        "baselineMemory": create_metric(to_mb(mean([r.analysis.baseline for r in raw])), "MB", t.get("baselineMemory")),
        "peakMemory": create_metric(to_mb(mean([r.analysis.peak for r in raw])), "MB", t.get("peakMemory")),
        "memoryLeaks": create_metric(leaks, "count", t.get("memoryLeaks")),
    }


def extract_scalability_metrics(raw: Optional[ScalabilityResult], test: BenchmarkTest) -> Metrics:
    if raw is None or not raw.results or raw.analysis is None:
        return {}
    t = test.target_metrics
    metrics = {
        "optimalEntityCount": create_metric(raw.analysis.optimal_entity_count, "entities",
                                            t.get("optimalEntityCount")),
        "linearityScore": create_metric(mean([r.scalability.linearity_score for r in raw.results]), "score",
                                        t.get("linearityScore")),
        "efficiencyScore": create_metric(mean([r.scalability.efficiency_score for r in raw.results]), "score",
                                         t.get("efficiencyScore")),
    }
    if raw.analysis.breaking_point is not None:
        metrics["breakingPoint"] = create_metric(raw.analysis.breaking_point, "entities", t.get("breakingPoint"))
    return metrics


def extract_combined_load_metrics(raw: List[CombinedLoadResult], test: BenchmarkTest) -> Metrics:
    if not raw:
        return {}
    t = test.target_metrics
    stable = sum(1 for r in raw if r.stability.overall_stable)
    return {
        "stabilityRate": create_metric(stable / len(raw) * 100, "%", t.get("stabilityRate")),
        "simulationPerformance": create_metric(mean([r.simulation.average_tick_time for r in raw]), "ms",
                                               t.get("simulationPerformance")),
        "uiPerformance": create_metric(mean([r.ui.average_response_time for r in raw]), "ms", t.get("uiPerformance")),
    }


def extract_tick_consistency_metrics(raw: Optional[TickConsistencyResult], test: BenchmarkTest) -> Metrics:
    if raw is None or raw.stats.count == 0:
        return {}
    t = test.target_metrics
    return {
        "averageTickTime": create_metric(raw.stats.average, "ms", t.get("averageTickTime")),
        "maxTickTime": create_metric(raw.stats.max, "ms", t.get("maxTickTime")),
        "consistency": create_metric(raw.stats.target_compliance, "%", t.get("consistency")),
        "variance": create_metric(raw.stats.std_dev, "ms", t.get("variance")),
    }


EXTRACTORS: Dict[ScenarioType, Callable[..., Metrics]] = {
    ScenarioType.EXTENDED: extract_extended_metrics,
    ScenarioType.MEMORY: extract_memory_metrics,
    ScenarioType.SCALABILITY: extract_scalability_metrics,
    ScenarioType.COMBINED_LOAD: extract_combined_load_metrics,
    ScenarioType.TICK_CONSISTENCY: extract_tick_consistency_metrics,
}
