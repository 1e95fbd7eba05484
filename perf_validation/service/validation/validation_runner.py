"""
Performance Validation Runner

Runs the full validation sequence (extended soak, memory, scalability,
combined load, then the benchmark suite), judges each stage against the
global release-gate targets and assembles the final ValidationReport.
"""
import json
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from perf_validation.config.harness_config import HarnessConfig
from perf_validation.consts.MetricStatus import MetricStatus
from perf_validation.models.benchmark_result import BaselineDocument, Environment, Regression
from perf_validation.models.validation_report import ValidationReport, ValidationResult, ValidationSummary
from perf_validation.service.benchmark.benchmark_orchestrator import BenchmarkRun, PerformanceBenchmark
from perf_validation.service.benchmark.environment import detect_environment
from perf_validation.service.monitor.resource_probe import ResourceProbe
from perf_validation.service.scenario.base import CollaboratorFactory
from perf_validation.service.scenario.combined_load_test import CombinedLoadTest
from perf_validation.service.scenario.memory_test import MemoryValidationTest
from perf_validation.service.scenario.scalability_test import ScalabilityTest
from perf_validation.service.scenario.soak_test import SoakTest
from perf_validation.service.validation import advice
from perf_validation.service.validation.validators import (
    BENCHMARK_TEST_NAME,
    COMBINED_LOAD_TEST_NAME,
    EXTENDED_TEST_NAME,
    MEMORY_TEST_NAME,
    SCALABILITY_TEST_NAME,
    validate_benchmark,
    validate_combined_load,
    validate_extended,
    validate_memory,
    validate_scalability,
)
from perf_validation.util.log_config import setup_logger

logger = setup_logger(__name__)


def score_result(result: ValidationResult) -> float:
    """Percentage of a result's metrics that passed"""
    if not result.metrics:
        return 0.0
    passed = sum(1 for m in result.metrics.values() if m.status == MetricStatus.PASS)
    return passed / len(result.metrics) * 100


def build_summary(results: List[ValidationResult]) -> ValidationSummary:
    total = len(results)
    passed = sum(1 for r in results if r.status == MetricStatus.PASS)
    failed = sum(1 for r in results if r.status == MetricStatus.FAIL)
    if failed > 0:
        status = MetricStatus.FAIL
    elif passed < total:
        status = MetricStatus.WARN
    else:
        status = MetricStatus.PASS
    score = sum(score_result(r) for r in results) / total if total else 0.0
    return ValidationSummary(
        total_tests=total,
        passed_tests=passed,
        failed_tests=failed,
        overall_status=status,
        overall_score=score,
    )


class PerformanceValidationRunner:

    def __init__(
        self,
        config: Optional[HarnessConfig] = None,
        collaborator_factory: Optional[CollaboratorFactory] = None,
        probe: Optional[ResourceProbe] = None,
        previous_baseline: Optional[BaselineDocument] = None,
        environment: Optional[Environment] = None,
    ):
        self.config = config or HarnessConfig()
        self.collaborator_factory = collaborator_factory
        self.probe = probe
        self.previous_baseline = previous_baseline
        self.environment = environment or detect_environment()
        self.results: List[ValidationResult] = []
        self.incomplete_tests: List[str] = []
        self.benchmark_run: Optional[BenchmarkRun] = None
        self.regressions: List[Regression] = []
        # Scenario output by validation test name, kept for series export
        self.raw_results: Dict[str, Any] = {}

    @property
    def _runner_kwargs(self) -> Dict[str, Any]:
        return {
            "collaborator_factory": self.collaborator_factory,
            "probe": self.probe,
            "policy": self.config.policy,
        }

    async def run_complete_validation(self) -> ValidationReport:
        logger.info("Starting performance validation...")
        logger.info(f"  Memory targets: <{self.config.validation.memory.baseline_mb:.0f}MB baseline, "
                    f"<{self.config.validation.memory.peak_mb:.0f}MB peak")
        logger.info(f"  Tick target: <{self.config.validation.performance.max_tick_time_ms:.0f}ms")

        began = time.perf_counter()
        self.results = []
        self.incomplete_tests = []
        self.benchmark_run = None
        self.regressions = []
        self.raw_results = {}

        await self._stage(EXTENDED_TEST_NAME, self._run_extended)
        await self._stage(MEMORY_TEST_NAME, self._run_memory)
        await self._stage(SCALABILITY_TEST_NAME, self._run_scalability)
        await self._stage(COMBINED_LOAD_TEST_NAME, self._run_combined_load)
        await self._stage(BENCHMARK_TEST_NAME, self._run_benchmark)

        report = self.generate_report(time.perf_counter() - began)
        logger.info("Performance validation completed")
        self.log_summary(report)
        return report

    async def _stage(self, test_name: str, run: Callable[[], Awaitable[Optional[ValidationResult]]]):
        logger.info(f"Running {test_name}...")
        try:
            result = await run()
        except Exception as e:
            logger.error(f"{test_name} failed: {e}")
            self.incomplete_tests.append(test_name)
            return
        if result is None:
            logger.warning(f"{test_name} produced no results")
            self.incomplete_tests.append(test_name)
            return
        self.results.append(result)
        logger.info(f"  ✓ {test_name} completed ({result.status.value})")

    async def _run_extended(self) -> Optional[ValidationResult]:
        results = await SoakTest(self.config.soak, **self._runner_kwargs).run()
        self.raw_results[EXTENDED_TEST_NAME] = results
        if not results:
            return None
        return validate_extended(results, self.config.validation)

    async def _run_memory(self) -> Optional[ValidationResult]:
        results = await MemoryValidationTest(self.config.memory, **self._runner_kwargs).run()
        self.raw_results[MEMORY_TEST_NAME] = results
        if not results:
            return None
        return validate_memory(results, self.config.validation)

    async def _run_scalability(self) -> Optional[ValidationResult]:
        outcome = await ScalabilityTest(self.config.scalability, **self._runner_kwargs).run()
        self.raw_results[SCALABILITY_TEST_NAME] = outcome
        if not outcome.results:
            return None
        return validate_scalability(outcome.results, outcome.analysis, self.config.validation)

    async def _run_combined_load(self) -> Optional[ValidationResult]:
        results = await CombinedLoadTest(self.config.combined_load, **self._runner_kwargs).run()
        self.raw_results[COMBINED_LOAD_TEST_NAME] = results
        if not results:
            return None
        return validate_combined_load(results, self.config.validation)

    async def _run_benchmark(self) -> Optional[ValidationResult]:
        benchmark = PerformanceBenchmark(
            settings=self.config.benchmark,
            scenario_configs=self.config,
            collaborator_factory=self.collaborator_factory,
            probe=self.probe,
            policy=self.config.policy,
            environment=self.environment,
        )
        run = await benchmark.run_benchmark_suite()
        self.benchmark_run = run
        if self.previous_baseline is not None:
            logger.info(f"Comparing against baseline {self.previous_baseline.version}")
            benchmark.load_baseline(self.previous_baseline)
            self.regressions = benchmark.detect_regressions(self.config.validation.regression)
        if not run.results:
            return None
        return validate_benchmark(run.summary)

    def generate_report(self, duration_s: float) -> ValidationReport:
        results = list(self.results)
        baseline = self.benchmark_run.baseline.to_dict() if self.benchmark_run else None
        return ValidationReport(
            summary=build_summary(results),
            test_results=tuple(results),
            performance_baselines=baseline,
            recommendations=tuple(advice.recommendations(results)),
            next_steps=tuple(advice.next_steps(results)),
            metadata={
                "environment": self.environment.to_dict(),
                "duration_s": duration_s,
                "timestamp": datetime.now().isoformat(),
                "seed": self.config.soak.seed,
                "incomplete_tests": list(self.incomplete_tests),
                "regressions": [r.to_dict() for r in self.regressions],
            },
        )

    def log_summary(self, report: ValidationReport):
        summary = report.summary
        logger.info("=" * 60)
        logger.info("Performance Validation Summary")
        logger.info("=" * 60)
        logger.info(f"Overall Status: {summary.overall_status.value.upper()}")
        logger.info(f"Overall Score: {summary.overall_score:.1f}%")
        logger.info(f"Passed Tests: {summary.passed_tests}/{summary.total_tests}")
        if summary.failed_tests > 0:
            logger.warning(f"Failed Tests: {summary.failed_tests}")
        for result in report.test_results:
            logger.info(f"  {result.test_name}: {result.status.value.upper()}")
        for name in report.metadata["incomplete_tests"]:
            logger.warning(f"  {name}: INCOMPLETE")
        if report.recommendations:
            logger.info("Recommendations:")
            for i, rec in enumerate(report.recommendations, 1):
                logger.info(f"  {i}. {rec}")
        if report.next_steps:
            logger.info("Next Steps:")
            for i, step in enumerate(report.next_steps, 1):
                logger.info(f"  {i}. {step}")
        logger.info(f"Total Duration: {report.metadata['duration_s'] / 60:.2f} minutes")

    def export_validation_report(self, report: ValidationReport) -> str:
        return json.dumps(report.to_dict(), ensure_ascii=False, indent=2)

    def get_results(self) -> List[ValidationResult]:
        return list(self.results)
