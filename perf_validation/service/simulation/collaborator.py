"""
Contract consumed from the external simulation.

Any object with these methods can be driven by the scenario runners. Lifecycle
methods may be plain or coroutine functions; the adapter awaits whatever they
return.
"""
from typing import Any, Callable, Dict, List, Protocol, runtime_checkable

from perf_validation.service.generator.entity_generator import WorkloadEntities, WorkloadEntity

# Event payloads are dicts with at least a "type" key holding a SimulationEventType value
SimulationEvent = Dict[str, Any]
EventListener = Callable[[SimulationEvent], None]


@runtime_checkable
class SimulationCollaborator(Protocol):

    def initialize(self, entities: WorkloadEntities) -> Any:
        ...

    def start(self) -> Any:
        ...

    def stop(self) -> Any:
        ...

    def cleanup(self) -> Any:
        ...

    def get_status(self) -> Dict[str, Any]:
        """Return {"current_tick": int, "is_running": bool}"""
        ...

    def get_performance_summary(self) -> Dict[str, Any]:
        """Return {"tick_times": [ms, ...]} for the most recent ticks, oldest first"""
        ...

    def add_entities(self, entities: List[WorkloadEntity]) -> Any:
        ...

    def add_event_listener(self, listener: EventListener) -> None:
        ...
