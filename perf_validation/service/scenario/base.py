"""
Scenario Runner Base Module

Shared lifecycle for every scenario runner:

    Idle -> Initializing -> WarmingUp -> Measuring -> Stopping -> Analyzed
                         (any non-terminal state) -> Failed

Each run executes under a supervisory timeout of `duration + timeout_grace_s`.
Whatever happens, teardown stops the sampler, cancels child tasks and stops and
cleans up the collaborator; each collaborator teardown call gets at most
`timeout_grace_s` before it is abandoned. A failed run is logged and recorded in
`runner.failures`; the next run still executes.
"""
import asyncio
from typing import Awaitable, Callable, Dict, FrozenSet, List, Optional, TypeVar

from perf_validation.config.analysis_policy import AnalysisPolicy
from perf_validation.config.test_config import TestConfig
from perf_validation.consts.ScenarioState import ScenarioState
from perf_validation.errors import CollaboratorError, ScenarioStateError, ScenarioTimeoutError
from perf_validation.models.scenario_result import ScenarioFailure
from perf_validation.service.generator.entity_generator import (
    STANDARD_PROFILE,
    DistributionProfile,
    EntityGenerator,
)
from perf_validation.service.monitor.resource_probe import PsutilProbe, ResourceProbe
from perf_validation.service.monitor.resource_sampler import ResourceSampler, SampleContext, SamplerHandle
from perf_validation.service.simulation.adapter import SimulationAdapter
from perf_validation.service.simulation.collaborator import SimulationCollaborator
from perf_validation.service.simulation.synthetic_simulation import SyntheticSimulation, SyntheticSimulationConfig
from perf_validation.util.log_config import setup_logger
from perf_validation.util.scheduler import CancellationToken, TaskScope

logger = setup_logger(__name__)

T = TypeVar("T")

CollaboratorFactory = Callable[[], SimulationCollaborator]

# Poll interval for duration-bounded runs
DEFAULT_POLL_INTERVAL_S = 0.05

LEGAL_TRANSITIONS: Dict[ScenarioState, FrozenSet[ScenarioState]] = {
    ScenarioState.IDLE: frozenset({ScenarioState.INITIALIZING, ScenarioState.FAILED}),
    ScenarioState.INITIALIZING: frozenset({ScenarioState.WARMING_UP, ScenarioState.FAILED}),
    ScenarioState.WARMING_UP: frozenset({ScenarioState.MEASURING, ScenarioState.FAILED}),
    ScenarioState.MEASURING: frozenset({ScenarioState.STOPPING, ScenarioState.FAILED}),
    ScenarioState.STOPPING: frozenset({ScenarioState.ANALYZED, ScenarioState.FAILED}),
    ScenarioState.ANALYZED: frozenset(),
    ScenarioState.FAILED: frozenset(),
}


class RunResources:
    """Everything a single run acquires; released by ScenarioRunner._teardown"""

    def __init__(self, name: str):
        self.name = name
        self.scope = TaskScope(name)
        self.adapter: Optional[SimulationAdapter] = None
        self.sampler: Optional[ResourceSampler] = None
        self.handle: Optional[SamplerHandle] = None
        self.context = SampleContext()

    @property
    def token(self) -> CancellationToken:
        return self.scope.token

    def stop_sampling(self):
        if self.sampler is not None and self.handle is not None:
            return self.sampler.stop(self.handle)
        return []


class TickRecorder:
    """
    Rebuilds the tick-time series of a run from the collaborator's bounded
    window of recent tick times, by appending the newest entries each time the
    tick counter advances.

    Ticks that fall out of the window between two polls cannot be recovered;
    they are counted in `lost_ticks`.
    """

    def __init__(self, adapter: SimulationAdapter, start_tick: Optional[int] = None):
        self.adapter = adapter
        self.last_tick = adapter.get_status().current_tick if start_tick is None else start_tick
        self.tick_times: List[float] = []
        self.lost_ticks = 0

    def poll(self, limit: Optional[int] = None) -> int:
        """Record ticks completed since the last poll; returns the current tick"""
        current = self.adapter.get_status().current_tick
        advanced = current - self.last_tick
        self.last_tick = max(current, self.last_tick)
        if advanced <= 0 or (limit is not None and len(self.tick_times) >= limit):
            return current

        window = self.adapter.get_performance_summary().tick_times
        new_ticks = window[-min(advanced, len(window)):] if window else []
        self.lost_ticks += advanced - len(new_ticks)
        if limit is not None:
            new_ticks = new_ticks[:limit - len(self.tick_times)]
        self.tick_times.extend(new_ticks)
        return current

    def complete(self, count: int) -> bool:
        return len(self.tick_times) >= count


async def wait_for_ticks(adapter: SimulationAdapter, ticks: int, poll_interval_s: float) -> int:
    """Wait until the tick counter has advanced by `ticks`; returns the final tick"""
    target = adapter.get_status().current_tick + ticks
    current = adapter.get_status().current_tick
    while current < target:
        await asyncio.sleep(poll_interval_s)
        current = adapter.get_status().current_tick
    return current


async def collect_ticks(adapter: SimulationAdapter, measurement_ticks: int,
                        poll_interval_s: float) -> TickRecorder:
    """Poll until exactly `measurement_ticks` tick times have been recorded"""
    recorder = TickRecorder(adapter)
    while True:
        recorder.poll(limit=measurement_ticks)
        if recorder.complete(measurement_ticks):
            break
        await asyncio.sleep(poll_interval_s)
    log_lost_ticks(recorder)
    return recorder


def log_lost_ticks(recorder: TickRecorder):
    if recorder.lost_ticks:
        logger.warning(f"{recorder.lost_ticks} ticks passed out of the collaborator's tick window "
                       f"between polls and were not measured")


class ScenarioRunner:
    """Base class for scenario runners"""

    name = "Scenario"

    def __init__(
        self,
        config: TestConfig,
        collaborator_factory: Optional[CollaboratorFactory] = None,
        probe: Optional[ResourceProbe] = None,
        policy: Optional[AnalysisPolicy] = None,
        profile: DistributionProfile = STANDARD_PROFILE,
    ):
        self.config = config
        self.collaborator_factory = collaborator_factory or self._default_collaborator
        self.probe = probe or PsutilProbe()
        self.policy = policy or AnalysisPolicy()
        self.profile = profile
        self.generator = EntityGenerator(config.seed)
        self.failures: List[ScenarioFailure] = []
        self.state = ScenarioState.IDLE

    def _default_collaborator(self) -> SimulationCollaborator:
        return SyntheticSimulation(SyntheticSimulationConfig(
            tick_interval_s=self.config.tick_interval_s,
            max_tick_time_ms=self.config.thresholds.max_tick_time_ms,
        ))

    def transition(self, new_state: ScenarioState):
        if new_state not in LEGAL_TRANSITIONS[self.state]:
            raise ScenarioStateError(f"Illegal transition {self.state.value} -> {new_state.value}")
        logger.debug(f"{self.name}: {self.state.value} -> {new_state.value}")
        self.state = new_state

    async def open_simulation(self, res: RunResources, entity_count: int) -> SimulationAdapter:
        """Create, initialize and start a collaborator with `entity_count` generated entities"""
        res.adapter = SimulationAdapter(self.collaborator_factory(), self.generator, self.profile)
        await res.adapter.initialize(self.generator.generate(entity_count, self.profile))
        res.context.entity_count = res.adapter.entity_count
        self.transition(ScenarioState.WARMING_UP)
        await res.adapter.start()
        return res.adapter

    def start_sampling(self, res: RunResources, interval_s: float, gc_every: Optional[int] = None) -> SamplerHandle:
        res.sampler = ResourceSampler(self.probe, res.context, gc_every)
        res.handle = res.sampler.start(interval_s)
        return res.handle

    async def finish_measuring(self, res: RunResources):
        """Measuring -> Stopping: stop sampling and halt the collaborator"""
        self.transition(ScenarioState.STOPPING)
        res.stop_sampling()
        await res.scope.close()
        if res.adapter is not None:
            await res.adapter.stop()

    async def run_guarded(self, run_name: str, budget_s: float,
                          body: Callable[[RunResources], Awaitable[T]]) -> Optional[T]:
        """
        Execute one run through the lifecycle under a supervisory timeout.

        Returns the body's result, or None when the run failed.
        """
        self.state = ScenarioState.IDLE
        res = RunResources(run_name)
        timeout = budget_s + self.config.timeout_grace_s
        try:
            self.transition(ScenarioState.INITIALIZING)
            result = await asyncio.wait_for(body(res), timeout=timeout)
            self.transition(ScenarioState.ANALYZED)
            return result
        except asyncio.TimeoutError:
            self._record_failure(run_name, ScenarioTimeoutError(run_name, timeout), timed_out=True)
        except (CollaboratorError, ScenarioStateError) as e:
            self._record_failure(run_name, e)
        except Exception as e:
            logger.exception(f"Unexpected error in {run_name}")
            self._record_failure(run_name, e)
        finally:
            await self._teardown(res)
        return None

    def _record_failure(self, run_name: str, error: BaseException, timed_out: bool = False):
        failed_in = self.state
        if not self.state.is_terminal:
            self.state = ScenarioState.FAILED
        logger.error(f"{run_name} failed during {failed_in.value}: {error}")
        self.failures.append(ScenarioFailure(
            run_name=run_name,
            error=str(error),
            state=failed_in,
            timed_out=timed_out,
        ))

    async def _teardown(self, res: RunResources):
        res.stop_sampling()
        await res.scope.close()
        if res.adapter is None:
            return
        await self._bounded_teardown_call(res, "stop", res.adapter.stop)
        await self._bounded_teardown_call(res, "cleanup", res.adapter.cleanup)

    async def _bounded_teardown_call(self, res: RunResources, operation: str,
                                     call: Callable[[], Awaitable[None]]):
        """Run one collaborator teardown call, giving up after `timeout_grace_s`"""
        limit = self.config.timeout_grace_s
        try:
            await asyncio.wait_for(call(), timeout=limit)
        except asyncio.TimeoutError:
            logger.warning(f"{res.name}: collaborator {operation} did not return within {limit:.1f}s; abandoned")
        except CollaboratorError as e:
            logger.warning(f"{res.name}: collaborator {operation} failed during teardown: {e}")

    async def cooldown(self):
        if self.config.cooldown_s > 0:
            logger.info(f"Cooling down for {self.config.cooldown_s:.1f}s")
            await asyncio.sleep(self.config.cooldown_s)
