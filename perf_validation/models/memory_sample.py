from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass
class MemorySample:
    """Single process memory snapshot taken by the resource sampler"""
    timestamp: float  # ms since the sampler started (monotonic clock)
    tick_number: int
    entity_count: int
    heap_used: int  # bytes
    heap_total: int
    external: int
    rss: int
    gc_forced: bool = False
    cpu_percent: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MemorySample':
        return cls(**data)
