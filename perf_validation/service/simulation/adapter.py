"""
Simulation Collaborator Adapter

Thin wrapper over a SimulationCollaborator: typed status/summary, idempotent
stop/cleanup, entity growth and event counting. It performs no analysis.
"""
import inspect
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, List

from perf_validation.consts.SimulationEventType import SimulationEventType
from perf_validation.errors import CollaboratorError
from perf_validation.service.generator.entity_generator import (
    STANDARD_PROFILE,
    DistributionProfile,
    EntityGenerator,
    WorkloadEntities,
)
from perf_validation.service.simulation.collaborator import SimulationCollaborator, SimulationEvent
from perf_validation.util.log_config import setup_logger

logger = setup_logger(__name__)


@dataclass
class SimulationStatus:
    current_tick: int
    is_running: bool


@dataclass
class PerformanceSummary:
    tick_times: List[float] = field(default_factory=list)


class SimulationAdapter:

    def __init__(
        self,
        collaborator: SimulationCollaborator,
        generator: EntityGenerator,
        profile: DistributionProfile = STANDARD_PROFILE,
    ):
        self.collaborator = collaborator
        self.generator = generator
        self.profile = profile
        self.event_counts: Counter = Counter()
        self.entity_count = 0
        self._started = False
        self._stopped = False
        self._cleaned_up = False
        self.collaborator.add_event_listener(self._on_event)

    async def _call(self, operation: str, fn: Callable[..., Any], *args) -> Any:
        try:
            result = fn(*args)
            if inspect.isawaitable(result):
                result = await result
            return result
        except CollaboratorError:
            raise
        except Exception as e:
            raise CollaboratorError(operation, e) from e

    async def initialize(self, entities: WorkloadEntities):
        await self._call("initialize", self.collaborator.initialize, entities)
        self.entity_count = len(entities)

    async def start(self):
        await self._call("start", self.collaborator.start)
        self._started = True
        self._stopped = False

    async def stop(self):
        """Halt the collaborator. Safe to call repeatedly or before start."""
        if self._stopped or not self._started:
            self._stopped = True
            return
        self._stopped = True
        await self._call("stop", self.collaborator.stop)

    async def cleanup(self):
        if self._cleaned_up:
            return
        self._cleaned_up = True
        await self._call("cleanup", self.collaborator.cleanup)

    async def add_entities(self, delta: int) -> WorkloadEntities:
        entities = self.generator.generate(delta, self.profile)
        await self._call("add_entities", self.collaborator.add_entities, entities.all())
        self.entity_count += len(entities)
        return entities

    def get_status(self) -> SimulationStatus:
        try:
            status = self.collaborator.get_status()
            return SimulationStatus(
                current_tick=int(status.get("current_tick", 0)),
                is_running=bool(status.get("is_running", False)),
            )
        except Exception as e:
            raise CollaboratorError("get_status", e) from e

    def get_performance_summary(self) -> PerformanceSummary:
        try:
            summary = self.collaborator.get_performance_summary() or {}
            return PerformanceSummary(tick_times=[float(t) for t in summary.get("tick_times") or []])
        except Exception as e:
            raise CollaboratorError("get_performance_summary", e) from e

    def event_count(self, event_type: SimulationEventType) -> int:
        return self.event_counts[event_type]

    def _on_event(self, event: SimulationEvent):
        try:
            event_type = SimulationEventType(event.get("type"))
        except ValueError:
            logger.debug(f"Ignoring unknown simulation event: {event.get('type')}")
            return
        self.event_counts[event_type] += 1
