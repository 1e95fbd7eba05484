"""
Scalability Analysis Module

Per-count throughput and baseline-relative scores, and the cross-count analysis
(optimal count, breaking point, scaling pattern, correlations, bottlenecks).
"""
from typing import List, Optional, Sequence

from perf_validation.config.analysis_policy import AnalysisPolicy
from perf_validation.models.scenario_result import (
    PerformanceCorrelation,
    ResourceBottlenecks,
    ScalabilityAnalysis,
    ScalabilityMemory,
    ScalabilityRunResult,
    ScalingCharacteristics,
    ScalingScores,
    Throughput,
    TickStats,
)
from perf_validation.util.cal_utils import mean, pearson_correlation

# Reported when the last tested count misses the per-tick target
ENTITY_PROCESSING_SUBSYSTEM = "entity_processing"


def calculate_throughput(tick_count: int, entity_count: int, elapsed_s: float) -> Throughput:
    if elapsed_s <= 0:
        return Throughput()
    return Throughput(
        ticks_per_second=tick_count / elapsed_s,
        entities_per_second=tick_count * entity_count / elapsed_s,
    )


def calculate_memory_usage(memory_usages: Sequence[float], entity_count: int) -> ScalabilityMemory:
    if not memory_usages:
        return ScalabilityMemory()
    average = mean(memory_usages)
    return ScalabilityMemory(
        peak_usage=max(memory_usages),
        average_usage=average,
        memory_per_entity=average / entity_count if entity_count else 0.0,
    )


def calculate_scaling_scores(stats: TickStats, entity_count: int,
                             baseline: Optional[ScalabilityRunResult]) -> ScalingScores:
    """
    Score a run against the first tested count.

    linearity: closeness of the average tick time to baseline_avg * count/baseline_count
    efficiency: per-entity tick time relative to the baseline's
    degradation: % change of the average tick time from the baseline's
    """
    if baseline is None:
        return ScalingScores()

    base_avg = baseline.performance.average
    if base_avg <= 0 or baseline.entity_count <= 0 or entity_count <= 0:
        return ScalingScores()

    expected = base_avg * (entity_count / baseline.entity_count)
    linearity = max(0.0, 100 - abs(stats.average - expected) / expected * 100)

    efficiency_ratio = (stats.average / entity_count) / (base_avg / baseline.entity_count)
    efficiency = max(0.0, 100 - (efficiency_ratio - 1) * 100)

    return ScalingScores(
        linearity_score=linearity,
        efficiency_score=efficiency,
        degradation_from_baseline=(stats.average - base_avg) / base_avg * 100,
    )


def find_optimal_entity_count(results: Sequence[ScalabilityRunResult], policy: AnalysisPolicy) -> int:
    optimal = results[0].entity_count
    best = results[0].scalability.efficiency_score
    for r in results:
        if r.scalability.efficiency_score > best and r.performance.target_compliance > policy.optimal_min_compliance_pct:
            best = r.scalability.efficiency_score
            optimal = r.entity_count
    return optimal


def find_breaking_point(results: Sequence[ScalabilityRunResult], target_ms: float,
                        policy: AnalysisPolicy) -> Optional[int]:
    for r in results:
        if (r.performance.target_compliance < policy.breaking_compliance_pct
                or r.performance.average > target_ms * policy.breaking_tick_factor):
            return r.entity_count
    return None


def classify_scaling(counts: Sequence[float], tick_times: Sequence[float],
                     policy: AnalysisPolicy) -> ScalingCharacteristics:
    r = pearson_correlation(counts, tick_times)

    if r > policy.correlation_excellent:
        return ScalingCharacteristics(
            "linear", "excellent",
            "Scaling is highly predictable and efficient. Current architecture handles load well.")
    if r > policy.correlation_good:
        return ScalingCharacteristics(
            "linear", "good",
            "Generally good scaling with some variation. Monitor for optimization opportunities.")
    if r > policy.correlation_acceptable:
        return ScalingCharacteristics(
            "logarithmic", "acceptable",
            "Scaling efficiency decreases with load. Consider optimization for higher entity counts.")

    ratios = [cur / prev for prev, cur in zip(tick_times, tick_times[1:]) if prev > 0]
    if ratios and mean(ratios) > policy.exponential_step_ratio:
        return ScalingCharacteristics(
            "exponential", "poor",
            "Performance degrades rapidly with scale. Significant optimization required.")
    return ScalingCharacteristics(
        "irregular", "acceptable",
        "Scaling pattern is irregular. Investigate specific bottlenecks at different scales.")


def identify_bottlenecks(results: Sequence[ScalabilityRunResult], target_ms: float,
                         policy: AnalysisPolicy) -> ResourceBottlenecks:
    first, last = results[0], results[-1]

    entity_growth = last.entity_count / first.entity_count if first.entity_count else 1.0
    perf_growth = last.performance.average / first.performance.average if first.performance.average else 1.0
    memory_growth = last.memory.average_usage / first.memory.average_usage if first.memory.average_usage else 1.0

    subsystems: List[str] = []
    if last.performance.average > target_ms:
        subsystems.append(ENTITY_PROCESSING_SUBSYSTEM)

    return ResourceBottlenecks(
        cpu=perf_growth > entity_growth * policy.bottleneck_growth_factor,
        memory=memory_growth > entity_growth * policy.bottleneck_growth_factor,
        subsystems=subsystems,
    )


def analyze_scalability(results: Sequence[ScalabilityRunResult], target_ms: float,
                        policy: AnalysisPolicy) -> Optional[ScalabilityAnalysis]:
    """Cross-count analysis; None when no count produced a result"""
    if not results:
        return None

    counts = [r.entity_count for r in results]
    tick_times = [r.performance.average for r in results]
    memory = [r.memory.average_usage for r in results]

    entity_r = pearson_correlation(counts, tick_times)
    memory_r = pearson_correlation(counts, memory)

    return ScalabilityAnalysis(
        optimal_entity_count=find_optimal_entity_count(results, policy),
        breaking_point=find_breaking_point(results, target_ms, policy),
        scaling_characteristics=classify_scaling(counts, tick_times, policy),
        performance_correlation=PerformanceCorrelation(
            entity_count_correlation=entity_r,
            memory_correlation=memory_r,
            predictive=entity_r > policy.predictive_correlation and memory_r > policy.predictive_correlation,
        ),
        resource_bottlenecks=identify_bottlenecks(results, target_ms, policy),
    )
