"""
Combined Load Test Module

Runs the simulation concurrently with a modeled UI workload: per-window update
loops, background operations and UI interactions, each on its own task in the
run's TaskScope. UI work is bounded synchronous busy-work cut into short slices
so the simulation keeps ticking.
"""
import asyncio
import time
from collections import Counter
from typing import Any, Dict, List, Optional

import numpy as np

from perf_validation.config.test_config import CombinedLoadConfig, Operation, WindowScenario, WindowType
from perf_validation.consts.Complexity import Complexity
from perf_validation.consts.ScenarioState import ScenarioState
from perf_validation.consts.SimulationEventType import SimulationEventType
from perf_validation.models.scenario_result import CombinedLoadResult, UiOperation
from perf_validation.service.analyzer.load_analysis import (
    analyze_stability,
    identify_bottlenecks,
    overall_recommendations,
    simulation_metrics,
    system_metrics,
    ui_metrics,
)
from perf_validation.service.scenario.base import (
    DEFAULT_POLL_INTERVAL_S,
    RunResources,
    ScenarioRunner,
    TickRecorder,
    log_lost_ticks,
)
from perf_validation.util.cal_utils import mean, to_mb
from perf_validation.util.log_config import setup_logger

logger = setup_logger(__name__)

# Busy-work duration ranges (ms) per window data complexity
COMPLEXITY_WORK_MS = {
    Complexity.LOW: (5.0, 15.0),
    Complexity.MEDIUM: (15.0, 35.0),
    Complexity.HIGH: (35.0, 75.0),
}

UI_INTERACTIONS = ("click", "scroll", "input", "navigation", "data_request")

# Longest stretch of busy-work before yielding to the event loop
WORK_SLICE_S = 0.01

RESOURCE_INTENSIVE_ELEMENTS = 10000


class CombinedLoadTest(ScenarioRunner):

    name = "Combined Load"

    def __init__(self, config: Optional[CombinedLoadConfig] = None, **kwargs):
        super().__init__(config or CombinedLoadConfig(), **kwargs)
        self.rng = np.random.default_rng(self.config.seed)
        self.results: List[CombinedLoadResult] = []

    async def run(self) -> List[CombinedLoadResult]:
        cfg: CombinedLoadConfig = self.config
        logger.info(f"Starting combined load test suite ({len(cfg.window_scenarios)} scenarios)")
        self.results = []

        for i, scenario in enumerate(cfg.window_scenarios):
            logger.info(f"Testing scenario: {scenario.name}")
            result = await self.run_guarded(
                f"Combined Load - {scenario.name}", cfg.duration_s,
                lambda res, s=scenario: self._run_scenario(res, s))
            if result is not None:
                self.results.append(result)
                self._log_result(result)
            if i < len(cfg.window_scenarios) - 1:
                await self.cooldown()

        logger.info("Combined load testing completed")
        return self.results

    async def _run_scenario(self, res: RunResources, scenario: WindowScenario) -> CombinedLoadResult:
        cfg: CombinedLoadConfig = self.config
        operations: List[UiOperation] = []

        adapter = await self.open_simulation(res, cfg.entity_count)
        self.start_sampling(res, cfg.sampling_interval_s)
        self.transition(ScenarioState.MEASURING)

        began = time.perf_counter()
        recorder = TickRecorder(adapter, start_tick=0)
        async with res.scope:
            for window_type in scenario.window_types:
                for n in range(scenario.window_count):
                    res.scope.spawn(self._window_loop(res, window_type, operations, began),
                                    name=f"window-{window_type.type}-{n}")
            for operation in scenario.simultaneous_operations:
                res.scope.spawn(self._operation_loop(res, operation, operations, began),
                                name=f"operation-{operation.type}")
            res.scope.spawn(self._ui_interaction_loop(res, scenario, operations, began), name="ui-interactions")

            while time.perf_counter() - began < cfg.duration_s:
                res.context.tick_number = recorder.poll()
                if await res.token.sleep(DEFAULT_POLL_INTERVAL_S):
                    break
            res.token.cancel()

        recorder.poll()
        log_lost_ticks(recorder)
        samples = res.stop_sampling()
        await self.finish_measuring(res)

        simulation = simulation_metrics(recorder.tick_times, cfg.tick_target_ms,
                                        adapter.event_count(SimulationEventType.DEGRADATION_APPLIED))
        ui = ui_metrics(operations)
        system = system_metrics(
            [s.cpu_percent for s in samples if s.cpu_percent is not None],
            [s.heap_used for s in samples],
        )

        return CombinedLoadResult(
            test_name=f"Combined Load - {scenario.name}",
            scenario_name=scenario.name,
            window_count=scenario.window_count,
            duration_s=cfg.duration_s,
            simulation=simulation,
            ui=ui,
            system=system,
            stability=analyze_stability(simulation, ui, system, self.policy),
            bottlenecks=identify_bottlenecks(simulation, ui, system, self.policy),
            seed=cfg.seed,
            operations=operations,
        )

    def _record(self, operations: List[UiOperation], op_type: str, duration_ms: float,
                began: float, resource_intensive: bool = False):
        operations.append(UiOperation(
            type=op_type,
            duration_ms=duration_ms,
            timestamp=(time.perf_counter() - began) * 1000.0,
            responsive=duration_ms < self.config.responsive_threshold_ms,
            resource_intensive=resource_intensive,
        ))

    async def _window_loop(self, res: RunResources, window_type: WindowType,
                           operations: List[UiOperation], began: float):
        interval = 1.0 / window_type.update_frequency
        low, high = COMPLEXITY_WORK_MS[window_type.data_complexity]
        while not res.token.cancelled:
            start = time.perf_counter()
            await self._busy_work(float(self.rng.uniform(low, high)))
            elapsed = time.perf_counter() - start
            self._record(operations, window_type.type, elapsed * 1000.0, began)
            if await res.token.sleep(interval - elapsed):
                return

    async def _operation_loop(self, res: RunResources, operation: Operation,
                              operations: List[UiOperation], began: float):
        interval = 1.0 / operation.frequency
        while not res.token.cancelled:
            start = time.perf_counter()
            await self._busy_work(operation.duration_ms)
            if operation.resource_intensive:
                await self._resource_intensive_work()
            elapsed = time.perf_counter() - start
            self._record(operations, operation.type, elapsed * 1000.0, began, operation.resource_intensive)
            if await res.token.sleep(interval - elapsed):
                return

    async def _ui_interaction_loop(self, res: RunResources, scenario: WindowScenario,
                                   operations: List[UiOperation], began: float):
        """Modeled interactions: duration grows with the number of window types on screen"""
        multiplier = len(scenario.window_types) * 1.2
        while not await res.token.sleep(1.0):
            for _ in range(self.config.ui_interaction_rate):
                op_type = UI_INTERACTIONS[int(self.rng.integers(len(UI_INTERACTIONS)))]
                duration = float(self.rng.uniform(10.0, 60.0)) * multiplier
                self._record(operations, op_type, duration, began)

    async def _busy_work(self, duration_ms: float):
        deadline = time.perf_counter() + duration_ms / 1000.0
        acc = 0.0
        while True:
            now = time.perf_counter()
            if now >= deadline:
                return acc
            slice_end = min(deadline, now + WORK_SLICE_S)
            while time.perf_counter() < slice_end:
                acc += self.rng.random() * self.rng.random()
            await asyncio.sleep(0)

    async def _resource_intensive_work(self):
        values = self.rng.random(RESOURCE_INTENSIVE_ELEMENTS)
        values.sort()
        await asyncio.sleep(0.001)

    def summary(self) -> Dict[str, Any]:
        if not self.results:
            return {"message": "No test results available"}

        total = len(self.results)
        stable = sum(1 for r in self.results if r.stability.overall_stable)
        frequency = Counter(name for r in self.results for name in r.bottlenecks.identified)
        return {
            "total_tests": total,
            "stable_tests": stable,
            "stability_rate": stable / total * 100,
            "performance": {
                "average_simulation_tick_time": mean([r.simulation.average_tick_time for r in self.results]),
                "average_ui_response_time": mean([r.ui.average_response_time for r in self.results]),
            },
            "bottleneck_frequency": dict(frequency),
            "recommendations": overall_recommendations(self.results),
            "failed_runs": [f.run_name for f in self.failures],
        }

    def _log_result(self, result: CombinedLoadResult):
        logger.info(f"=== {result.test_name} ===")
        logger.info(f"  Simulation: avg {result.simulation.average_tick_time:.2f}ms, "
                    f"compliance {result.simulation.target_compliance:.1f}%, "
                    f"stddev {result.simulation.tick_time_variance:.2f}ms")
        logger.info(f"  UI: avg {result.ui.average_response_time:.2f}ms, "
                    f"responsive {result.ui.responsive_operations}/"
                    f"{result.ui.responsive_operations + result.ui.unresponsive_operations}")
        logger.info(f"  System: cpu {result.system.average_cpu:.1f}%, "
                    f"memory peak {to_mb(result.system.memory_peak):.2f}MB")
        logger.info(f"  Stable: {result.stability.overall_stable}, "
                    f"bottlenecks ({result.bottlenecks.severity.value}): {result.bottlenecks.identified}")
