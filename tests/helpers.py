from typing import Sequence

from perf_validation.config.test_config import MB
from perf_validation.models.memory_sample import MemorySample
from perf_validation.service.simulation.synthetic_simulation import SyntheticSimulation, SyntheticSimulationConfig


def make_samples(heap_mb: Sequence[float], interval_ms: float = 1000.0):
    """Samples with the given heap readings, one every `interval_ms`"""
    return [
        MemorySample(
            timestamp=(i + 1) * interval_ms,
            tick_number=i,
            entity_count=8,
            heap_used=int(mb * MB),
            heap_total=int(mb * MB),
            external=0,
            rss=int(mb * MB),
        )
        for i, mb in enumerate(heap_mb)
    ]


def fast_simulation_factory(tick_interval_s: float = 0.01, cost_per_entity_ms: float = 0.1,
                            monitoring_window: int = 20):
    def factory():
        return SyntheticSimulation(SyntheticSimulationConfig(
            tick_interval_s=tick_interval_s,
            base_cost_ms=0.2,
            cost_per_entity_ms=cost_per_entity_ms,
            bytes_per_entity=1024,
            monitoring_window=monitoring_window,
        ))
    return factory
