"""
Console tables for validation and benchmark output.
"""
from typing import List, Sequence

from tabulate import tabulate

from perf_validation.models.benchmark_result import BenchmarkResult, Regression
from perf_validation.models.validation_report import ValidationReport


def _fmt(value: float) -> str:
    return f"{value:.2f}" if isinstance(value, float) else str(value)


def validation_table(report: ValidationReport) -> str:
    rows: List[list] = []
    for result in report.test_results:
        for name, metric in result.metrics.items():
            rows.append([result.test_name, name, _fmt(metric.value), _fmt(metric.target),
                         metric.unit, metric.status.value])
    headers = ["test", "metric", "value", "target", "unit", "status"]
    return tabulate(rows, headers=headers, tablefmt="github", stralign="left", numalign="left")


def benchmark_table(results: Sequence[BenchmarkResult]) -> str:
    rows = [[r.suite, r.test_name, f"{r.performance.score:.1f}", r.performance.grade.value,
             ", ".join(f"{name}={_fmt(m.value)}{m.unit}" for name, m in r.metrics.items())]
            for r in results]
    headers = ["suite", "test", "score", "grade", "metrics"]
    return tabulate(rows, headers=headers, tablefmt="github", stralign="left", numalign="left")


def regression_table(regressions: Sequence[Regression]) -> str:
    rows = [[r.test_name, r.metric, r.category, _fmt(r.baseline), _fmt(r.value),
             f"{r.regression:+.1f}%", f"{r.threshold:.0f}%"] for r in regressions]
    headers = ["test", "metric", "category", "baseline", "value", "change", "threshold"]
    return tabulate(rows, headers=headers, tablefmt="github", stralign="left", numalign="left")


def print_report(report: ValidationReport, results: Sequence[BenchmarkResult] = (),
                 regressions: Sequence[Regression] = ()):
    print(validation_table(report))
    if results:
        print()
        print(benchmark_table(results))
    if regressions:
        print()
        print("  ❌ Regressions detected:")
        print(regression_table(regressions))
