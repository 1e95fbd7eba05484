"""
Reference simulation collaborator.

SyntheticSimulation ticks on its own asyncio task and burns a configurable
amount of CPU per tick in proportion to its entities' activity. It has no
domain logic; it lets the harness run end to end without the real engine.
"""
import asyncio
import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional

from perf_validation.consts.SimulationEventType import SimulationEventType
from perf_validation.service.generator.entity_generator import WorkloadEntities, WorkloadEntity
from perf_validation.service.simulation.collaborator import EventListener, SimulationEvent
from perf_validation.util.log_config import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class SyntheticSimulationConfig:
    tick_interval_s: float = 1.0
    base_cost_ms: float = 1.0
    cost_per_entity_ms: float = 0.5
    # Resident memory held per entity, to give memory scenarios something to see
    bytes_per_entity: int = 64 * 1024
    max_tick_time_ms: float = 100.0
    warning_pct: float = 70.0
    critical_pct: float = 90.0
    monitoring_window: int = 20
    enable_degradation: bool = True
    # Lowest fraction of the full per-tick workload that degradation may reduce to
    min_quality: float = 0.5


class SyntheticSimulation:

    def __init__(self, config: Optional[SyntheticSimulationConfig] = None):
        self.config = config or SyntheticSimulationConfig()
        self.entities: List[WorkloadEntity] = []
        self.current_tick = 0
        self.quality = 1.0
        self.checksum = 0.0
        self.tick_times: Deque[float] = deque(maxlen=self.config.monitoring_window)
        self._payloads: Dict[str, bytearray] = {}
        self._listeners: List[EventListener] = []
        self._task: Optional[asyncio.Task] = None
        self._running = False
        self._initialized = False

    async def initialize(self, entities: WorkloadEntities):
        self.entities = []
        self._payloads.clear()
        self._add(entities.all())
        self._initialized = True
        logger.debug(f"Synthetic simulation initialized with {len(self.entities)} entities")

    def start(self):
        if not self._initialized:
            raise RuntimeError("Simulation must be initialized before start")
        if self._running:
            return
        self._running = True
        self._task = asyncio.get_running_loop().create_task(self._tick_loop())

    async def stop(self):
        self._running = False
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    def cleanup(self):
        self.entities = []
        self._payloads.clear()
        self._listeners.clear()
        self._initialized = False

    def get_status(self) -> Dict:
        return {"current_tick": self.current_tick, "is_running": self._running}

    def get_performance_summary(self) -> Dict:
        return {"tick_times": list(self.tick_times)}

    def add_entities(self, entities: List[WorkloadEntity]):
        self._add(entities)

    def add_event_listener(self, listener: EventListener):
        self._listeners.append(listener)

    def _add(self, entities: List[WorkloadEntity]):
        for entity in entities:
            self.entities.append(entity)
            if self.config.bytes_per_entity > 0:
                self._payloads[entity.id] = bytearray(self.config.bytes_per_entity)

    def tick_cost_ms(self) -> float:
        activity = sum(e.activity for e in self.entities)
        return (self.config.base_cost_ms + self.config.cost_per_entity_ms * activity) * self.quality

    async def _tick_loop(self):
        while self._running:
            began = time.perf_counter()
            self._tick()
            elapsed = time.perf_counter() - began
            await asyncio.sleep(max(0.0, self.config.tick_interval_s - elapsed))

    def _tick(self):
        began = time.perf_counter()
        deadline = began + self.tick_cost_ms() / 1000.0
        acc = 0.0
        i = 0
        n = len(self.entities)
        while time.perf_counter() < deadline:
            if n:
                entity = self.entities[i % n]
                acc += entity.vector[0] * entity.vector[1] * entity.resources
            i += 1
        tick_time = (time.perf_counter() - began) * 1000.0
        self.checksum = acc

        self.current_tick += 1
        self.tick_times.append(tick_time)
        self._check_budget(tick_time)

    def _check_budget(self, tick_time: float):
        max_tick = self.config.max_tick_time_ms
        if tick_time > max_tick * self.config.critical_pct / 100:
            self._emit({"type": SimulationEventType.PERFORMANCE_CRITICAL.value, "tick_time": tick_time})
            if self.config.enable_degradation and self.quality > self.config.min_quality:
                self.quality = max(self.config.min_quality, self.quality * 0.8)
                self._emit({"type": SimulationEventType.DEGRADATION_APPLIED.value, "quality": self.quality})
        elif tick_time > max_tick * self.config.warning_pct / 100:
            self._emit({"type": SimulationEventType.PERFORMANCE_WARNING.value, "tick_time": tick_time})

    def _emit(self, event: SimulationEvent):
        for listener in list(self._listeners):
            listener(event)
