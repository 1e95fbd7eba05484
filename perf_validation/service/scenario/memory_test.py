"""
Memory Validation Test Module

Four memory scenarios sharing one analyzer:
- static: fixed entity count for the duration
- dynamic: entities added every growth interval up to a cap
- stress: high entity count, half duration, GC forced half as often
- leak: moderate entity count, 1.5x duration, GC never forced
"""
import math
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from perf_validation.config.test_config import MemoryTestConfig
from perf_validation.consts.ScenarioState import ScenarioState
from perf_validation.models.scenario_result import MemoryTestResult
from perf_validation.service.analyzer.memory_analysis import analyze_memory, validate_memory
from perf_validation.service.scenario.base import DEFAULT_POLL_INTERVAL_S, RunResources, ScenarioRunner
from perf_validation.util.cal_utils import mean, to_mb
from perf_validation.util.log_config import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class MemoryVariant:
    test_name: str
    variant: str
    entity_count: int
    duration_s: float
    sampling_interval_s: float
    gc_every: Optional[int]  # samples between forced collections; None disables
    grows: bool = False


def gc_every_n_samples(gc_interval_s: float, sampling_interval_s: float) -> int:
    return max(1, round(gc_interval_s / sampling_interval_s))


def growth_step(current: int, growth_rate: float, cap: int) -> int:
    """Entities to add at the next growth interval (0 once the cap is reached)"""
    if current >= cap:
        return 0
    return min(max(1, math.ceil(current * growth_rate)), cap - current)


class MemoryValidationTest(ScenarioRunner):

    name = "Memory"

    def __init__(self, config: Optional[MemoryTestConfig] = None, **kwargs):
        super().__init__(config or MemoryTestConfig(), **kwargs)
        self.results: List[MemoryTestResult] = []

    def variants(self) -> List[MemoryVariant]:
        cfg: MemoryTestConfig = self.config
        stress_interval = cfg.sampling_interval_s / 2
        return [
            MemoryVariant("Static Memory Test", "static", cfg.static_entity_count, cfg.duration_s,
                          cfg.sampling_interval_s, gc_every_n_samples(cfg.gc_interval_s, cfg.sampling_interval_s)),
            MemoryVariant("Dynamic Memory Test", "dynamic", cfg.dynamic_start_count, cfg.duration_s,
                          cfg.sampling_interval_s, gc_every_n_samples(cfg.gc_interval_s, cfg.sampling_interval_s),
                          grows=True),
            MemoryVariant("Memory Stress Test", "stress", cfg.stress_entity_count, cfg.duration_s / 2,
                          stress_interval, gc_every_n_samples(cfg.gc_interval_s * 2, stress_interval)),
            MemoryVariant("Memory Leak Test", "leak", cfg.leak_entity_count, cfg.duration_s * 1.5,
                          cfg.sampling_interval_s, None),
        ]

    async def run(self, variants: Optional[List[str]] = None) -> List[MemoryTestResult]:
        """Run every variant, or only those named in `variants`"""
        logger.info("Starting memory validation tests...")
        self.results = []
        selected = [v for v in self.variants() if variants is None or v.variant in variants]

        for i, variant in enumerate(selected):
            logger.info(f"Running {variant.test_name} ({variant.entity_count} entities, {variant.duration_s:.0f}s)")
            result = await self.run_guarded(
                variant.test_name, variant.duration_s,
                lambda res, v=variant: self._run_variant(res, v))
            if result is not None:
                self.results.append(result)
                self._log_result(result)
            if i < len(selected) - 1:
                await self.cooldown()

        logger.info("Memory validation completed")
        return self.results

    async def _run_variant(self, res: RunResources, variant: MemoryVariant) -> MemoryTestResult:
        adapter = await self.open_simulation(res, variant.entity_count)
        self.start_sampling(res, variant.sampling_interval_s, variant.gc_every)
        self.transition(ScenarioState.MEASURING)

        async with res.scope:
            if variant.grows:
                res.scope.spawn(self._grow_entities(res), name=f"{variant.variant}-growth")

            began = time.perf_counter()
            while time.perf_counter() - began < variant.duration_s:
                res.context.tick_number = adapter.get_status().current_tick
                if await res.token.sleep(DEFAULT_POLL_INTERVAL_S):
                    break
            res.token.cancel()

        samples = res.stop_sampling()
        await self.finish_measuring(res)

        analysis = analyze_memory(samples, self.config.thresholds, self.policy)
        return MemoryTestResult(
            test_name=variant.test_name,
            variant=variant.variant,
            duration_s=variant.duration_s,
            analysis=analysis,
            validation=validate_memory(analysis, self.config.thresholds),
            seed=self.config.seed,
            samples=samples,
        )

    async def _grow_entities(self, res: RunResources):
        cfg: MemoryTestConfig = self.config
        while not await res.token.sleep(cfg.growth_interval_s):
            delta = growth_step(res.adapter.entity_count, cfg.entity_growth_rate, cfg.growth_cap)
            if delta == 0:
                return
            await res.adapter.add_entities(delta)
            res.context.entity_count = res.adapter.entity_count
            logger.info(f"Added {delta} entities. Total: {res.adapter.entity_count}")

    def summary(self) -> Dict[str, Any]:
        if not self.results:
            return {"message": "No test results available"}

        total = len(self.results)
        passed = sum(1 for r in self.results if r.validation.overall_pass)
        return {
            "total_tests": total,
            "passed_tests": passed,
            "pass_rate": passed / total * 100,
            "memory_stats": {
                "average_baseline_mb": to_mb(mean([r.analysis.baseline for r in self.results])),
                "average_peak_mb": to_mb(mean([r.analysis.peak for r in self.results])),
                "memory_leaks_detected": sum(1 for r in self.results if r.analysis.leak.detected),
                "sustained_pressure_events": sum(1 for r in self.results if r.analysis.pressure.sustained_pressure),
            },
            "thresholds": {
                "baseline_mb": self.config.thresholds.baseline_memory_mb,
                "peak_mb": self.config.thresholds.peak_memory_mb,
            },
            "failed_runs": [f.run_name for f in self.failures],
        }

    def _log_result(self, result: MemoryTestResult):
        a = result.analysis
        logger.info(f"=== {result.test_name} ===")
        logger.info(f"  Samples: {len(result.samples)}, baseline/peak/average: "
                    f"{to_mb(a.baseline):.2f}/{to_mb(a.peak):.2f}/{to_mb(a.average):.2f} MB")
        logger.info(f"  Growth: {a.growth.linear_growth_mb_per_min:.2f} MB/min, "
                    f"exponential: {a.growth.exponential_growth}")
        logger.info(f"  Leak: {a.leak.detected} ({a.leak.severity.value}), "
                    f"sustained pressure: {a.pressure.sustained_pressure}")
        logger.info(f"  Validation: {'PASSED' if result.validation.overall_pass else 'FAILED'}")
        for issue in result.validation.issues:
            logger.warning(f"  Issue: {issue}")
