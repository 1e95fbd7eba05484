"""
Performance Benchmark Orchestrator

Runs weighted suites of benchmark tests sequentially, grades each test A-F,
builds the BaselineDocument for this version and environment, and compares
results against a previous baseline to compute regression.
"""
import asyncio
import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from perf_validation.config.analysis_policy import AnalysisPolicy
from perf_validation.config.benchmark_suite import BenchmarkSettings, BenchmarkSuite, BenchmarkTest
from perf_validation.config.harness_config import HarnessConfig
from perf_validation.config.test_config import TestConfig
from perf_validation.config.validation_targets import RegressionThresholds
from perf_validation.consts.Grade import Grade
from perf_validation.consts.MetricStatus import MetricStatus
from perf_validation.consts.ScenarioType import ScenarioType
from perf_validation.errors import HarnessError
from perf_validation.models.benchmark_result import (
    BaselineDocument,
    BaselineEntry,
    BaselineMetadata,
    BenchmarkResult,
    BenchmarkSummary,
    Environment,
    Regression,
)
from perf_validation.service.analyzer.scoring import calculate_performance_score, is_higher_better
from perf_validation.service.benchmark.environment import detect_environment
from perf_validation.service.benchmark.metric_extractors import EXTRACTORS
from perf_validation.service.monitor.resource_probe import ResourceProbe
from perf_validation.service.scenario.base import CollaboratorFactory
from perf_validation.service.scenario.combined_load_test import CombinedLoadTest
from perf_validation.service.scenario.memory_test import MemoryValidationTest
from perf_validation.service.scenario.scalability_test import ScalabilityTest
from perf_validation.service.scenario.soak_test import SoakTest
from perf_validation.service.scenario.tick_consistency_test import TickConsistencyTest
from perf_validation.util.log_config import setup_logger

logger = setup_logger(__name__)

CRITICAL_PATH_MARKERS = ("Time", "Performance", "Consistency")

# Substring of a failed "test.metric" name -> recommendation
FAILED_METRIC_ADVICE = (
    ("averageTickTime", "Optimize simulation tick processing and implement performance budgeting"),
    ("memory", "Implement memory optimization strategies and garbage collection tuning"),
    ("stability", "Improve system stability through better error handling and resource management"),
    ("scalability", "Enhance scalability through algorithmic optimization and resource pooling"),
)
DEFAULT_ADVICE = "All performance targets met. Focus on optimization opportunities for future scaling."


def metric_category(metric_name: str) -> str:
    """Regression category of a metric: memory, stability or performance"""
    name = metric_name.lower()
    if "memory" in name:
        return "memory"
    if any(marker in name for marker in ("stability", "consistency", "compliance")):
        return "stability"
    return "performance"


@dataclass
class BenchmarkRun:
    results: List[BenchmarkResult]
    baseline: BaselineDocument
    summary: BenchmarkSummary
    failed_tests: List[str] = field(default_factory=list)


class PerformanceBenchmark:

    def __init__(
        self,
        settings: Optional[BenchmarkSettings] = None,
        scenario_configs: Optional[HarnessConfig] = None,
        collaborator_factory: Optional[CollaboratorFactory] = None,
        probe: Optional[ResourceProbe] = None,
        policy: Optional[AnalysisPolicy] = None,
        environment: Optional[Environment] = None,
    ):
        self.scenario_configs = scenario_configs or HarnessConfig()
        self.settings = settings or self.scenario_configs.benchmark
        self.collaborator_factory = collaborator_factory
        self.probe = probe
        self.policy = policy or self.scenario_configs.policy
        self.environment = environment or detect_environment()
        self.results: List[BenchmarkResult] = []
        self.failed_tests: List[str] = []
        self.current_baseline: Optional[BaselineDocument] = None
        self._tests: Dict[str, BenchmarkTest] = {}

    async def run_benchmark_suite(self) -> BenchmarkRun:
        env = self.environment
        logger.info("Starting benchmark suite...")
        logger.info(f"Environment: {env.platform} {env.architecture}, Python {env.python_version}, "
                    f"{env.cpu_cores} cores")
        self.results = []
        self.failed_tests = []
        self._tests = {}

        tests = [(suite, test) for suite in self.settings.suites for test in suite.tests]
        for i, (suite, test) in enumerate(tests):
            logger.info(f"[{suite.name}] Running test: {test.name}")
            try:
                result = await self.run_benchmark_test(test, suite)
                self.results.append(result)
                self._log_result(result)
            except Exception as e:
                logger.error(f"Failed to run test {test.name}: {e}")
                self.failed_tests.append(test.name)
            if i < len(tests) - 1 and self.settings.cooldown_s > 0:
                await asyncio.sleep(self.settings.cooldown_s)

        self.current_baseline = self.generate_baseline_document()
        summary = self.summary()
        self._log_summary(summary)
        return BenchmarkRun(
            results=list(self.results),
            baseline=self.current_baseline,
            summary=summary,
            failed_tests=list(self.failed_tests),
        )

    async def run_benchmark_test(self, test: BenchmarkTest, suite: BenchmarkSuite) -> BenchmarkResult:
        began = datetime.now()
        raw = await self.run_scenario(test)
        metrics = EXTRACTORS[test.type](raw, test)
        if not metrics:
            raise HarnessError(f"{test.type.value} scenario produced no results")

        self._tests[test.name] = test
        logger.info(f"  Completed in {(datetime.now() - began).total_seconds():.2f}s")
        return BenchmarkResult(
            test_name=test.name,
            suite=suite.name,
            version=self.settings.baseline_version,
            environment=self.environment,
            metrics=metrics,
            performance=calculate_performance_score(metrics, suite.weight),
            raw_data=raw,
        )

    def scenario_config(self, test: BenchmarkTest) -> TestConfig:
        """The configured scenario settings with the test's overrides applied"""
        base = {
            ScenarioType.EXTENDED: self.scenario_configs.soak,
            ScenarioType.MEMORY: self.scenario_configs.memory,
            ScenarioType.SCALABILITY: self.scenario_configs.scalability,
            ScenarioType.COMBINED_LOAD: self.scenario_configs.combined_load,
            ScenarioType.TICK_CONSISTENCY: self.scenario_configs.tick_consistency,
        }[test.type]
        overrides = dict(test.config)
        if not self.settings.use_suite_durations:
            overrides.pop("duration_s", None)
        return dataclasses.replace(base, **overrides)

    async def run_scenario(self, test: BenchmarkTest) -> Any:
        config = self.scenario_config(test)
        kwargs = {"collaborator_factory": self.collaborator_factory, "probe": self.probe, "policy": self.policy}
        if test.type == ScenarioType.EXTENDED:
            return await SoakTest(config, **kwargs).run()
        if test.type == ScenarioType.MEMORY:
            return await MemoryValidationTest(config, **kwargs).run()
        if test.type == ScenarioType.SCALABILITY:
            return await ScalabilityTest(config, **kwargs).run()
        if test.type == ScenarioType.COMBINED_LOAD:
            return await CombinedLoadTest(config, **kwargs).run()
        if test.type == ScenarioType.TICK_CONSISTENCY:
            return await TickConsistencyTest(config, **kwargs).run()
        raise HarnessError(f"Unknown test type: {test.type}")

    def generate_baseline_document(self) -> BaselineDocument:
        baselines: Dict[str, BaselineEntry] = {}
        critical_path: List[str] = []
        optimization_targets: List[str] = []

        for result in self.results:
            test = self._tests.get(result.test_name)
            targets = test.target_metrics if test else {}
            baselines[result.test_name] = BaselineEntry(
                metrics={name: m.value for name, m in result.metrics.items()},
                targets={name: targets[name].target for name in result.metrics if name in targets},
                description=f"Baseline for {result.test_name}",
            )
            for name, metric in result.metrics.items():
                qualified = f"{result.test_name}.{name}"
                if metric.status == MetricStatus.FAIL and qualified not in optimization_targets:
                    optimization_targets.append(qualified)
                if any(marker in name for marker in CRITICAL_PATH_MARKERS) and qualified not in critical_path:
                    critical_path.append(qualified)

        overall = sum(r.performance.score for r in self.results) / len(self.results) if self.results else 0.0
        return BaselineDocument(
            version=self.settings.baseline_version,
            created_at=datetime.now().isoformat(),
            environment=self.environment,
            baselines=baselines,
            metadata=BaselineMetadata(
                total_tests=len(self.results),
                overall_score=overall,
                critical_path_metrics=critical_path,
                optimization_targets=optimization_targets,
            ),
        )

    def load_baseline(self, baseline: BaselineDocument):
        """Back-fill baseline and regression (% change) on metrics the baseline also recorded"""
        for result in self.results:
            entry = baseline.baselines.get(result.test_name)
            if entry is None:
                continue
            for name, metric in result.metrics.items():
                previous = entry.metrics.get(name)
                if previous is None or previous == 0:
                    continue
                metric.baseline = previous
                metric.regression = (metric.value - previous) / previous * 100

    def detect_regressions(self, thresholds: Optional[RegressionThresholds] = None) -> List[Regression]:
        """Metrics whose change in the worse direction exceeds their category threshold"""
        thresholds = thresholds or RegressionThresholds()
        limits = {
            "performance": thresholds.performance_pct,
            "memory": thresholds.memory_pct,
            "stability": thresholds.stability_pct,
        }
        regressions = []
        for result in self.results:
            for name, metric in result.metrics.items():
                if metric.regression is None:
                    continue
                higher_better = is_higher_better(metric.unit)
                if higher_better is None:
                    worsening = abs(metric.regression)
                else:
                    worsening = -metric.regression if higher_better else metric.regression
                category = metric_category(name)
                if worsening > limits[category]:
                    regressions.append(Regression(
                        test_name=result.test_name,
                        metric=name,
                        category=category,
                        baseline=metric.baseline,
                        value=metric.value,
                        regression=metric.regression,
                        threshold=limits[category],
                    ))
        for r in regressions:
            logger.warning(f"Regression in {r.test_name}.{r.metric}: {r.regression:+.1f}% "
                           f"({r.category} threshold {r.threshold:.0f}%)")
        return regressions

    def summary(self) -> BenchmarkSummary:
        total = len(self.results)
        passed = sum(1 for r in self.results if r.performance.grade in (Grade.A, Grade.B))
        breakdown = {g.value: sum(1 for r in self.results if r.performance.grade == g) for g in Grade}
        return BenchmarkSummary(
            total_tests=total,
            passed_tests=passed,
            pass_rate=passed / total * 100 if total else 0.0,
            overall_score=sum(r.performance.score for r in self.results) / total if total else 0.0,
            performance_breakdown=breakdown,
            critical_issues=[r.test_name for r in self.results if r.performance.grade == Grade.F],
            recommendations=self.recommendations(),
            environment=self.environment,
        )

    def recommendations(self) -> List[str]:
        failed = [f"{r.test_name}.{name}" for r in self.results
                  for name, m in r.metrics.items() if m.status == MetricStatus.FAIL]
        advice = [text for marker, text in FAILED_METRIC_ADVICE if any(marker in f for f in failed)]
        return advice or [DEFAULT_ADVICE]

    def _log_result(self, result: BenchmarkResult):
        logger.info(f"  Score: {result.performance.score:.1f} (Grade {result.performance.grade.value})")
        for name, metric in result.metrics.items():
            logger.info(f"    {name}: {metric.value:.2f}{metric.unit} [{metric.status.value}]")

    def _log_summary(self, summary: BenchmarkSummary):
        logger.info("=== Benchmark Summary ===")
        logger.info(f"Tests: {summary.passed_tests}/{summary.total_tests} passed ({summary.pass_rate:.1f}%)")
        logger.info(f"Overall score: {summary.overall_score:.1f}")
        logger.info(f"Grades: {summary.performance_breakdown}")
        if summary.critical_issues:
            logger.warning(f"Critical issues: {', '.join(summary.critical_issues)}")
        for rec in summary.recommendations:
            logger.info(f"  - {rec}")
