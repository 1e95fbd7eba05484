import asyncio

import pytest

from perf_validation.config.test_config import (
    MB,
    CombinedLoadConfig,
    MemoryTestConfig,
    Operation,
    ScalabilityConfig,
    TestConfig,
    TickConsistencyConfig,
    WindowScenario,
    WindowType,
)
from perf_validation.consts.ScenarioState import ScenarioState
from perf_validation.errors import ScenarioStateError
from perf_validation.service.generator.entity_generator import EntityGenerator
from perf_validation.service.monitor.resource_probe import StaticProbe
from perf_validation.service.scenario.base import TickRecorder
from perf_validation.service.scenario.combined_load_test import CombinedLoadTest
from perf_validation.service.scenario.memory_test import MemoryValidationTest, growth_step
from perf_validation.service.scenario.scalability_test import ScalabilityTest
from perf_validation.service.scenario.soak_test import SoakTest
from perf_validation.service.scenario.tick_consistency_test import TickConsistencyTest
from perf_validation.service.simulation.adapter import SimulationAdapter
from helpers import fast_simulation_factory


class HangingSimulation:
    """Collaborator whose initialize never returns"""

    def __init__(self):
        self.cleaned_up = False

    async def initialize(self, entities):
        await asyncio.sleep(3600)

    def start(self):
        pass

    def stop(self):
        pass

    def cleanup(self):
        self.cleaned_up = True

    def get_status(self):
        return {"current_tick": 0, "is_running": False}

    def get_performance_summary(self):
        return {"tick_times": []}

    def add_entities(self, entities):
        pass

    def add_event_listener(self, listener):
        pass


class BrokenStartSimulation(HangingSimulation):

    async def initialize(self, entities):
        pass

    def start(self):
        raise RuntimeError("engine refused to start")


def quick_memory_config(**overrides):
    values = dict(duration_s=1.0, sampling_interval_s=0.1, gc_interval_s=0.5, cooldown_s=0,
                  tick_interval_s=0.02, timeout_grace_s=5)
    values.update(overrides)
    return MemoryTestConfig(**values)


def test_static_memory_under_limits_passes():
    runner = MemoryValidationTest(quick_memory_config(), probe=StaticProbe(150 * MB),
                                  collaborator_factory=fast_simulation_factory())
    results = asyncio.run(runner.run(variants=["static"]))

    assert len(results) == 1
    result = results[0]
    assert result.variant == "static"
    assert result.analysis.leak.detected is False
    assert result.validation.overall_pass is True
    assert len(result.samples) >= 5
    assert runner.state == ScenarioState.ANALYZED
    assert runner.summary()["passed_tests"] == 1


def test_hanging_collaborator_times_out():
    simulation = HangingSimulation()
    runner = MemoryValidationTest(quick_memory_config(duration_s=0.1, timeout_grace_s=0.2),
                                  probe=StaticProbe(150 * MB), collaborator_factory=lambda: simulation)
    results = asyncio.run(runner.run(variants=["static"]))

    assert results == []
    assert len(runner.failures) == 1
    failure = runner.failures[0]
    assert failure.timed_out is True
    assert failure.state == ScenarioState.INITIALIZING
    assert runner.state == ScenarioState.FAILED
    assert simulation.cleaned_up is True


def test_collaborator_error_fails_run_and_next_run_continues():
    calls = []

    def factory():
        calls.append(1)
        return BrokenStartSimulation()

    config = TestConfig(duration_s=0.2, entity_counts=(2, 3), sampling_interval_s=0.1,
                        cooldown_s=0, timeout_grace_s=5)
    runner = SoakTest(config, probe=StaticProbe(150 * MB), collaborator_factory=factory)
    results = asyncio.run(runner.run())

    assert results == []
    assert len(calls) == 2
    assert [f.run_name for f in runner.failures] == ["Extended-2-Entities", "Extended-3-Entities"]
    assert all(f.state == ScenarioState.WARMING_UP for f in runner.failures)
    assert all(not f.timed_out for f in runner.failures)


def test_illegal_transition():
    runner = SoakTest()
    with pytest.raises(ScenarioStateError):
        runner.transition(ScenarioState.MEASURING)
    runner.transition(ScenarioState.INITIALIZING)
    assert runner.state == ScenarioState.INITIALIZING


def test_soak_runs_every_entity_count():
    config = TestConfig(duration_s=0.5, entity_counts=(2, 3), sampling_interval_s=0.1,
                        cooldown_s=0, tick_interval_s=0.02, timeout_grace_s=5)
    runner = SoakTest(config, probe=StaticProbe(150 * MB), collaborator_factory=fast_simulation_factory(0.02))
    results = asyncio.run(runner.run())

    assert [r.entity_count for r in results] == [2, 3]
    for result in results:
        assert result.total_ticks > 0
        assert result.performance.count == len(result.tick_times)
        assert result.memory.peak == 150 * MB
        assert result.stability.memory_leak_detected is False
    assert runner.summary()["total_tests"] == 2


def test_scalability_measures_exact_tick_counts():
    config = ScalabilityConfig(entity_counts=(4, 2), warmup_ticks=2, measurement_ticks=5, duration_s=5,
                               cooldown_s=0, tick_interval_s=0.01, timeout_grace_s=5)
    runner = ScalabilityTest(config, probe=StaticProbe(100 * MB), collaborator_factory=fast_simulation_factory())
    result = asyncio.run(runner.run())

    assert [r.entity_count for r in result.results] == [2, 4]
    assert all(r.performance.count == 5 for r in result.results)
    assert result.results[0].scalability.linearity_score == 100
    assert result.analysis is not None
    assert result.analysis.breaking_point is None


def test_combined_load_records_operations():
    scenario = WindowScenario(
        name="Solo",
        window_count=1,
        window_types=(WindowType("main", 10),),
        simultaneous_operations=(Operation("refresh", 5, 5),),
    )
    config = CombinedLoadConfig(duration_s=1.2, sampling_interval_s=0.1, cooldown_s=0, entity_count=2,
                                tick_interval_s=0.02, timeout_grace_s=5, window_scenarios=(scenario,))
    runner = CombinedLoadTest(config, probe=StaticProbe(150 * MB), collaborator_factory=fast_simulation_factory(0.02))
    results = asyncio.run(runner.run())

    assert len(results) == 1
    result = results[0]
    assert result.scenario_name == "Solo"
    types = {op.type for op in result.operations}
    assert {"main", "refresh"} <= types
    assert result.ui.responsive_operations + result.ui.unresponsive_operations == len(result.operations)
    assert result.system.memory_peak == 150 * MB


@pytest.mark.parametrize("current, expected", [(4, 1), (10, 1), (15, 1), (16, 0), (20, 0)])
def test_growth_step_respects_cap(current, expected):
    assert growth_step(current, 0.1, 16) == expected


class StalledSimulation(HangingSimulation):
    """Starts, never ticks, and never returns from stop"""

    def __init__(self):
        super().__init__()
        self.stop_called = False

    async def initialize(self, entities):
        pass

    async def stop(self):
        self.stop_called = True
        await asyncio.sleep(3600)


def test_stalled_collaborator_teardown_is_abandoned():
    simulation = StalledSimulation()
    config = ScalabilityConfig(entity_counts=(4,), duration_s=0.2, timeout_grace_s=0.2, cooldown_s=0)
    runner = ScalabilityTest(config, probe=StaticProbe(100 * MB), collaborator_factory=lambda: simulation)

    result = asyncio.run(asyncio.wait_for(runner.run(), timeout=5))

    assert result.results == []
    assert len(runner.failures) == 1
    assert runner.failures[0].timed_out is True
    assert runner.failures[0].state == ScenarioState.WARMING_UP
    assert simulation.stop_called is True
    assert simulation.cleaned_up is True


class ScriptedTicks(HangingSimulation):
    """Tick counter and recent-tick window driven directly by the test"""

    def __init__(self, window_size):
        super().__init__()
        self.window_size = window_size
        self.current_tick = 0
        self.history = []

    def advance(self, *tick_times):
        self.history.extend(tick_times)
        self.current_tick += len(tick_times)

    def get_status(self):
        return {"current_tick": self.current_tick, "is_running": True}

    def get_performance_summary(self):
        return {"tick_times": self.history[-self.window_size:]}


def test_tick_recorder_counts_ticks_that_left_the_window():
    ticks = ScriptedTicks(window_size=2)
    recorder = TickRecorder(SimulationAdapter(ticks, EntityGenerator(1)))

    ticks.advance(1.0, 2.0, 3.0, 4.0)
    recorder.poll(limit=5)
    assert recorder.tick_times == [3.0, 4.0]
    assert recorder.lost_ticks == 2
    assert not recorder.complete(5)

    ticks.advance(5.0)
    recorder.poll(limit=5)
    ticks.advance(6.0, 7.0)
    recorder.poll(limit=5)
    assert recorder.tick_times == [3.0, 4.0, 5.0, 6.0, 7.0]
    assert recorder.complete(5)

    ticks.advance(8.0, 9.0, 10.0)
    recorder.poll(limit=5)
    assert len(recorder.tick_times) == 5
    assert recorder.lost_ticks == 2


def test_single_entry_window_still_measures_every_requested_tick():
    config = TickConsistencyConfig(entity_count=2, measurement_ticks=50, poll_interval_s=0.05,
                                   duration_s=10, cooldown_s=0, timeout_grace_s=5)
    runner = TickConsistencyTest(config, probe=StaticProbe(100 * MB),
                                 collaborator_factory=fast_simulation_factory(0.002, monitoring_window=1))
    result = asyncio.run(runner.run())

    assert result is not None
    assert result.stats.count == 50
    assert len(result.tick_times) == 50
    assert result.lost_ticks > 0


def test_scalability_measures_exact_ticks_with_single_entry_window():
    config = ScalabilityConfig(entity_counts=(2,), warmup_ticks=2, measurement_ticks=20, poll_interval_s=0.02,
                               duration_s=10, cooldown_s=0, timeout_grace_s=5)
    runner = ScalabilityTest(config, probe=StaticProbe(100 * MB),
                             collaborator_factory=fast_simulation_factory(0.002, monitoring_window=1))
    result = asyncio.run(runner.run())

    assert len(result.results) == 1
    run = result.results[0]
    assert run.performance.count == 20
    assert run.lost_ticks > 0
