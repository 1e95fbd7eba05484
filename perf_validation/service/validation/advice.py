"""
Recommendations and next steps for a validation report, chosen from fixed
advice by the categories of the failed results.
"""
from typing import List, Sequence

from perf_validation.consts.MetricStatus import MetricStatus
from perf_validation.models.validation_report import ValidationResult

PERFORMANCE_ADVICE = (
    "Implement performance optimization in simulation tick processing",
    "Consider implementing performance budgeting for subsystems",
    "Optimize critical path algorithms in political entity processing",
)
MEMORY_ADVICE = (
    "Implement memory pooling and object reuse strategies",
    "Optimize garbage collection patterns and timing",
    "Review and optimize data structure choices for memory efficiency",
)
SCALABILITY_ADVICE = (
    "Implement entity processing optimization for higher counts",
    "Consider implementing load balancing across subsystems",
    "Optimize algorithms for O(n) complexity where possible",
)
STABILITY_ADVICE = (
    "Improve error handling and graceful degradation mechanisms",
    "Implement resource monitoring and automatic throttling",
    "Enhance system stability through better resource management",
)
ALL_TARGETS_MET_ADVICE = (
    "All performance targets met - focus on optimization opportunities",
    "Consider implementing advanced performance monitoring",
    "Document current performance characteristics as baselines",
)

FAILURE_NEXT_STEPS = (
    "Address critical performance issues identified in failed tests",
    "Implement recommended optimizations in priority order",
    "Re-run validation tests to verify improvements",
)
SUCCESS_NEXT_STEPS = (
    "Implement continuous performance monitoring in CI/CD pipeline",
    "Set up performance regression detection alerts",
    "Plan for performance optimization in next development cycle",
)
COMMON_NEXT_STEPS = (
    "Document performance baselines in project documentation",
    "Schedule regular performance validation runs",
    "Consider implementing automated performance testing",
)


def _has_metric(result: ValidationResult, *markers: str) -> bool:
    return any(marker in name for name in result.metrics for marker in markers)


def failed_categories(results: Sequence[ValidationResult]) -> List[str]:
    """Categories (performance, memory, scalability, stability) touched by failed results"""
    failed = [r for r in results if r.status == MetricStatus.FAIL]
    categories = []
    if any(_has_metric(r, "Time", "Performance") for r in failed):
        categories.append("performance")
    if any(_has_metric(r, "memory", "Memory") for r in failed):
        categories.append("memory")
    if any("Scalability" in r.test_name for r in failed):
        categories.append("scalability")
    if any(_has_metric(r, "stability", "Stability") for r in failed):
        categories.append("stability")
    return categories


def recommendations(results: Sequence[ValidationResult]) -> List[str]:
    advice = {
        "performance": PERFORMANCE_ADVICE,
        "memory": MEMORY_ADVICE,
        "scalability": SCALABILITY_ADVICE,
        "stability": STABILITY_ADVICE,
    }
    recs = [text for category in failed_categories(results) for text in advice[category]]
    return recs or list(ALL_TARGETS_MET_ADVICE)


def next_steps(results: Sequence[ValidationResult]) -> List[str]:
    any_failed = any(r.status == MetricStatus.FAIL for r in results)
    steps = list(FAILURE_NEXT_STEPS if any_failed else SUCCESS_NEXT_STEPS)
    steps.extend(COMMON_NEXT_STEPS)
    return steps
