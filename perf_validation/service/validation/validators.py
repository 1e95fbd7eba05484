"""
Release-gate judgement of scenario output.

Each validator turns one scenario's results into a ValidationResult, judged
against the global ValidationTargets rather than the scenario's own
thresholds.
"""
from typing import Dict, List, Optional

from perf_validation.config.test_config import MB
from perf_validation.config.validation_targets import ValidationTargets
from perf_validation.consts.MetricStatus import MetricStatus
from perf_validation.models.benchmark_result import BenchmarkSummary
from perf_validation.models.scenario_result import (
    CombinedLoadResult,
    MemoryTestResult,
    ScalabilityAnalysis,
    ScalabilityRunResult,
    SoakResult,
)
from perf_validation.models.validation_report import ValidationMetric, ValidationResult
from perf_validation.util.cal_utils import mean

EXTENDED_TEST_NAME = "Extended Performance Tests"
MEMORY_TEST_NAME = "Memory Usage Validation"
SCALABILITY_TEST_NAME = "Scalability Testing"
COMBINED_LOAD_TEST_NAME = "Combined Load Testing"
BENCHMARK_TEST_NAME = "Performance Benchmarking"

UI_RESPONSE_TARGET_MS = 200.0
UI_RESPONSE_WARN_MS = 300.0
SCORE_TARGET = 80.0
SCORE_WARN = 60.0

PASS, WARN, FAIL = MetricStatus.PASS, MetricStatus.WARN, MetricStatus.FAIL


def overall_status(metrics: Dict[str, ValidationMetric]) -> MetricStatus:
    statuses = [m.status for m in metrics.values()]
    if FAIL in statuses:
        return FAIL
    if WARN in statuses:
        return WARN
    return PASS


def _at_least(value: float, target: float, warn_floor: Optional[float] = None) -> MetricStatus:
    if value >= target:
        return PASS
    if warn_floor is not None and value >= warn_floor:
        return WARN
    return FAIL


def _at_most(value: float, target: float, warn_ceiling: Optional[float] = None) -> MetricStatus:
    if value <= target:
        return PASS
    if warn_ceiling is not None and value <= warn_ceiling:
        return WARN
    return FAIL


def validate_extended(results: List[SoakResult], targets: ValidationTargets) -> ValidationResult:
    perf = targets.performance
    peak_bytes = targets.memory.peak_mb * MB
    metrics: Dict[str, ValidationMetric] = {}

    if results:
        avg_tick = mean([r.performance.average for r in results])
        avg_compliance = mean([r.performance.target_compliance for r in results])
        avg_peak = mean([r.memory.peak for r in results])
        passed = sum(1 for r in results
                     if r.performance.average <= perf.max_tick_time_ms and r.memory.peak <= peak_bytes)
        pass_rate = passed / len(results)

        metrics["averageTickTime"] = ValidationMetric(
            avg_tick, perf.average_tick_time_ms,
            _at_most(avg_tick, perf.average_tick_time_ms, perf.max_tick_time_ms), "ms")
        metrics["targetCompliance"] = ValidationMetric(
            avg_compliance, perf.target_compliance_pct,
            _at_least(avg_compliance, perf.target_compliance_pct, 80.0), "%")
        metrics["memoryPeak"] = ValidationMetric(
            avg_peak / MB, targets.memory.peak_mb, _at_most(avg_peak, peak_bytes), "MB")
        metrics["testPassRate"] = ValidationMetric(
            pass_rate * 100, 90.0, _at_least(pass_rate, 0.9, 0.7), "%")

    return ValidationResult(
        test_name=EXTENDED_TEST_NAME,
        status=overall_status(metrics),
        metrics=metrics,
        details=[r.to_dict(include_series=False) for r in results],
    )


def validate_memory(results: List[MemoryTestResult], targets: ValidationTargets) -> ValidationResult:
    mem = targets.memory
    metrics: Dict[str, ValidationMetric] = {}

    if results:
        total = len(results)
        passed = sum(1 for r in results if r.validation.overall_pass)
        avg_baseline = mean([r.analysis.baseline for r in results])
        avg_peak = mean([r.analysis.peak for r in results])
        leaks = sum(1 for r in results if r.analysis.leak.detected)

        metrics["memoryPassRate"] = ValidationMetric(
            passed / total * 100, 100.0, _at_least(passed, total, total * 0.8), "%")
        metrics["baselineMemory"] = ValidationMetric(
            avg_baseline / MB, mem.baseline_mb, _at_most(avg_baseline, mem.baseline_mb * MB), "MB")
        metrics["peakMemory"] = ValidationMetric(
            avg_peak / MB, mem.peak_mb, _at_most(avg_peak, mem.peak_mb * MB), "MB")
        metrics["memoryLeaks"] = ValidationMetric(leaks, 0, _at_most(leaks, 0, 1), "count")

    return ValidationResult(
        test_name=MEMORY_TEST_NAME,
        status=overall_status(metrics),
        metrics=metrics,
        details=[r.to_dict(include_series=False) for r in results],
    )


def validate_scalability(results: List[ScalabilityRunResult], analysis: Optional[ScalabilityAnalysis],
                         targets: ValidationTargets) -> ValidationResult:
    scale = targets.scalability
    metrics: Dict[str, ValidationMetric] = {}

    if results and analysis is not None:
        linearity = mean([r.scalability.linearity_score for r in results])
        efficiency = mean([r.scalability.efficiency_score for r in results])

        metrics["optimalEntityCount"] = ValidationMetric(
            analysis.optimal_entity_count, scale.optimal_entity_count,
            PASS if analysis.optimal_entity_count >= scale.min_entity_count else WARN, "entities")
        metrics["linearityScore"] = ValidationMetric(
            linearity, SCORE_TARGET, _at_least(linearity, SCORE_TARGET, SCORE_WARN), "score")
        metrics["efficiencyScore"] = ValidationMetric(
            efficiency, SCORE_TARGET, _at_least(efficiency, SCORE_TARGET, SCORE_WARN), "score")
        if analysis.breaking_point is not None:
            metrics["breakingPoint"] = ValidationMetric(
                analysis.breaking_point, scale.max_entity_count,
                PASS if analysis.breaking_point >= scale.max_entity_count else WARN, "entities")

    return ValidationResult(
        test_name=SCALABILITY_TEST_NAME,
        status=overall_status(metrics),
        metrics=metrics,
        details={
            "results": [r.to_dict(include_series=False) for r in results],
            "analysis": analysis.to_dict() if analysis is not None else None,
        },
    )


def validate_combined_load(results: List[CombinedLoadResult], targets: ValidationTargets) -> ValidationResult:
    max_tick = targets.performance.max_tick_time_ms
    metrics: Dict[str, ValidationMetric] = {}

    if results:
        total = len(results)
        stable = sum(1 for r in results if r.stability.overall_stable)
        sim = mean([r.simulation.average_tick_time for r in results])
        ui = mean([r.ui.average_response_time for r in results])

        metrics["stabilityRate"] = ValidationMetric(
            stable / total * 100, 100.0, _at_least(stable, total, total * 0.8), "%")
        metrics["simulationPerformance"] = ValidationMetric(
            sim, max_tick, _at_most(sim, max_tick, max_tick * 1.5), "ms")
        metrics["uiPerformance"] = ValidationMetric(
            ui, UI_RESPONSE_TARGET_MS, _at_most(ui, UI_RESPONSE_TARGET_MS, UI_RESPONSE_WARN_MS), "ms")

    return ValidationResult(
        test_name=COMBINED_LOAD_TEST_NAME,
        status=overall_status(metrics),
        metrics=metrics,
        details=[r.to_dict(include_series=False) for r in results],
    )


def validate_benchmark(summary: Optional[BenchmarkSummary]) -> ValidationResult:
    metrics: Dict[str, ValidationMetric] = {}

    if summary is not None:
        critical = len(summary.critical_issues)
        metrics["overallScore"] = ValidationMetric(
            summary.overall_score, SCORE_TARGET, _at_least(summary.overall_score, SCORE_TARGET, SCORE_WARN), "score")
        metrics["passRate"] = ValidationMetric(
            summary.pass_rate, 90.0, _at_least(summary.pass_rate, 90.0, 70.0), "%")
        metrics["criticalIssues"] = ValidationMetric(critical, 0, _at_most(critical, 0, 2), "count")

    return ValidationResult(
        test_name=BENCHMARK_TEST_NAME,
        status=overall_status(metrics),
        metrics=metrics,
        details=summary.to_dict() if summary is not None else None,
    )
