"""
Metric judgement and A-F grading.
"""
from typing import Dict, Optional

from perf_validation.config.benchmark_suite import MetricTarget
from perf_validation.consts.Grade import Grade
from perf_validation.consts.MetricStatus import MetricStatus
from perf_validation.models.benchmark_result import PerformanceScore
from perf_validation.models.metric import Metric
from perf_validation.util.log_config import setup_logger

logger = setup_logger(__name__)

HIGHER_IS_BETTER_UNITS = frozenset({"%", "score", "entities"})
LOWER_IS_BETTER_UNITS = frozenset({"ms", "s", "MB", "bytes", "count"})

STATUS_SCORES = {
    MetricStatus.PASS: 100,
    MetricStatus.WARN: 70,
    MetricStatus.FAIL: 30,
}

GRADE_BANDS = (
    (90, Grade.A),
    (80, Grade.B),
    (70, Grade.C),
    (60, Grade.D),
)


def is_higher_better(unit: str) -> Optional[bool]:
    """True/False for known units, None when the unit has no known direction"""
    if unit in HIGHER_IS_BETTER_UNITS:
        return True
    if unit in LOWER_IS_BETTER_UNITS:
        return False
    return None


def create_metric(value: float, unit: str, target: Optional[MetricTarget] = None) -> Metric:
    """
    Judge a value against a target/threshold pair.

    Higher-better units fail below the threshold and warn below the target;
    lower-better units mirror that. Without a target the metric passes.
    """
    if target is None:
        return Metric(value=value, unit=unit, status=MetricStatus.PASS)

    higher_better = is_higher_better(unit)
    if higher_better is None:
        logger.warning(f"Unit '{unit}' has no known direction; metric value {value} defaults to pass")
        return Metric(value=value, unit=unit, status=MetricStatus.PASS, ambiguous=True)

    if higher_better:
        if value < target.threshold:
            status = MetricStatus.FAIL
        elif value < target.target:
            status = MetricStatus.WARN
        else:
            status = MetricStatus.PASS
    else:
        if value > target.threshold:
            status = MetricStatus.FAIL
        elif value > target.target:
            status = MetricStatus.WARN
        else:
            status = MetricStatus.PASS

    return Metric(value=value, unit=unit, status=status)


def grade_for_score(score: float) -> Grade:
    for floor, grade in GRADE_BANDS:
        if score >= floor:
            return grade
    return Grade.F


def calculate_performance_score(metrics: Dict[str, Metric], suite_weight: int) -> PerformanceScore:
    breakdown = {name: STATUS_SCORES[m.status] for name, m in metrics.items()}
    average = sum(breakdown.values()) / len(breakdown) if breakdown else 0.0
    score = average * (suite_weight / 10)
    return PerformanceScore(score=score, grade=grade_for_score(score), breakdown=breakdown)
