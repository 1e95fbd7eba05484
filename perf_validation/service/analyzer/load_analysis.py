"""
Combined-load analysis: simulation/UI/system metrics, stability verdicts and
rule-based bottleneck identification.
"""
from typing import List, Sequence

from perf_validation.config.analysis_policy import AnalysisPolicy
from perf_validation.config.test_config import MB
from perf_validation.consts.BottleneckSeverity import BottleneckSeverity
from perf_validation.models.scenario_result import (
    Bottlenecks,
    CombinedLoadResult,
    LoadStability,
    SimulationLoadMetrics,
    SystemMetrics,
    UiMetrics,
    UiOperation,
)
from perf_validation.util.cal_utils import calculate_tick_stats, half_split_ratio, mean

# Fewer memory samples than this are too short to judge growth
LEAK_MIN_SAMPLES = 10


def simulation_metrics(tick_times: Sequence[float], target_ms: float, degradation_events: int) -> SimulationLoadMetrics:
    stats = calculate_tick_stats(tick_times, target_ms)
    return SimulationLoadMetrics(
        average_tick_time=stats.average,
        tick_time_variance=stats.std_dev,
        target_compliance=stats.target_compliance,
        degradation_events=degradation_events,
    )


def ui_metrics(operations: Sequence[UiOperation]) -> UiMetrics:
    if not operations:
        return UiMetrics()
    durations = [op.duration_ms for op in operations]
    responsive = sum(1 for op in operations if op.responsive)
    return UiMetrics(
        average_response_time=mean(durations),
        max_response_time=max(durations),
        responsive_operations=responsive,
        unresponsive_operations=len(operations) - responsive,
    )


def system_metrics(cpu_usage: Sequence[float], memory_usage: Sequence[float]) -> SystemMetrics:
    return SystemMetrics(
        cpu_usage=list(cpu_usage),
        memory_usage=list(memory_usage),
        memory_peak=max(memory_usage) if memory_usage else 0.0,
    )


def no_resource_leaks(memory_usage: Sequence[float], policy: AnalysisPolicy) -> bool:
    if len(memory_usage) < LEAK_MIN_SAMPLES:
        return True
    return half_split_ratio(memory_usage) <= policy.load_leak_growth_ratio


def _responsive_ratio(ui: UiMetrics) -> float:
    total = ui.responsive_operations + ui.unresponsive_operations
    return ui.responsive_operations / total if total else 1.0


def analyze_stability(simulation: SimulationLoadMetrics, ui: UiMetrics, system: SystemMetrics,
                      policy: AnalysisPolicy) -> LoadStability:
    simulation_stable = (simulation.target_compliance > policy.stable_compliance_pct
                         and simulation.tick_time_variance < policy.stable_tick_stddev_ms)
    ui_responsive = (ui.average_response_time < policy.responsive_avg_ms
                     and _responsive_ratio(ui) > policy.responsive_ratio)
    memory_stable = system.memory_peak < policy.stable_memory_peak_mb * MB
    leaks_ok = no_resource_leaks(system.memory_usage, policy)

    return LoadStability(
        simulation_stable=simulation_stable,
        ui_responsive=ui_responsive,
        memory_stable=memory_stable,
        no_resource_leaks=leaks_ok,
        overall_stable=simulation_stable and ui_responsive and memory_stable and leaks_ok,
    )


def bottleneck_severity(issue_count: int, policy: AnalysisPolicy) -> BottleneckSeverity:
    if issue_count == 0:
        return BottleneckSeverity.NONE
    if issue_count <= policy.severity_minor_max:
        return BottleneckSeverity.MINOR
    if issue_count <= policy.severity_moderate_max:
        return BottleneckSeverity.MODERATE
    return BottleneckSeverity.SEVERE


def identify_bottlenecks(simulation: SimulationLoadMetrics, ui: UiMetrics, system: SystemMetrics,
                         policy: AnalysisPolicy) -> Bottlenecks:
    identified: List[str] = []
    recommendations: List[str] = []

    def flag(issue: str, recommendation: str):
        identified.append(issue)
        recommendations.append(recommendation)

    if simulation.average_tick_time > policy.bottleneck_tick_ms:
        flag("Simulation tick performance", "Optimize simulation subsystems and entity processing")
    if simulation.target_compliance < policy.bottleneck_compliance_pct:
        flag("Simulation consistency", "Implement performance budgeting and graceful degradation")
    if ui.average_response_time > policy.bottleneck_ui_avg_ms:
        flag("UI responsiveness", "Optimize UI rendering and implement virtual scrolling")
    if 1 - _responsive_ratio(ui) > policy.bottleneck_unresponsive_ratio:
        flag("UI operation performance", "Implement operation queuing and prioritization")
    if system.average_cpu > policy.bottleneck_cpu_pct:
        flag("CPU utilization", "Implement CPU-intensive operation throttling")
    if system.memory_peak > policy.bottleneck_memory_mb * MB:
        flag("Memory usage", "Optimize memory allocation and implement garbage collection")

    return Bottlenecks(
        identified=identified,
        severity=bottleneck_severity(len(identified), policy),
        recommendations=recommendations,
    )


# Bottleneck name -> overall recommendation across all scenarios
OVERALL_RECOMMENDATIONS = (
    ("Simulation tick performance", "Implement simulation performance optimization and tick budgeting"),
    ("UI responsiveness", "Optimize UI rendering and implement progressive loading"),
    ("Memory usage", "Implement memory pooling and garbage collection optimization"),
    ("CPU utilization", "Implement work scheduling and CPU throttling mechanisms"),
)


def overall_recommendations(results: Sequence[CombinedLoadResult]) -> List[str]:
    seen = {name for r in results for name in r.bottlenecks.identified}
    recommendations = [advice for name, advice in OVERALL_RECOMMENDATIONS if name in seen]
    return recommendations or ["System performs well under combined load scenarios"]
