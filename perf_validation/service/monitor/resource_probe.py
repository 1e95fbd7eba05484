"""
Process introspection behind a small capability interface.

PsutilProbe reads the real process; StaticProbe and ScriptedProbe return
deterministic readings for tests and dry runs.
"""
import gc
import threading
import tracemalloc
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

import psutil

from perf_validation.util.log_config import setup_logger

logger = setup_logger(__name__)


@dataclass
class MemoryReading:
    """Memory figures in bytes"""
    heap_used: int
    heap_total: int
    external: int
    rss: int


class ResourceProbe(ABC):

    @abstractmethod
    def read_memory(self) -> MemoryReading:
        ...

    @abstractmethod
    def read_cpu_percent(self) -> float:
        ...

    def force_gc(self) -> bool:
        """Trigger a manual collection. Returns False when the host offers none."""
        return False


class PsutilProbe(ResourceProbe):
    """
    Real process probe.

    Without heap tracking `heap_used` is the resident set size and `heap_total`
    the virtual memory size. With `track_heap=True` tracemalloc is started and
    `heap_used`/`heap_total` report the traced current/peak Python allocations,
    with `external` holding the rest of the resident set.
    """

    def __init__(self, pid: Optional[int] = None, track_heap: bool = False):
        self.process = psutil.Process(pid)
        self.track_heap = track_heap
        if track_heap and not tracemalloc.is_tracing():
            tracemalloc.start()
        # Initialize CPU percent (first call returns 0.0)
        self.process.cpu_percent(interval=None)

    def read_memory(self) -> MemoryReading:
        info = self.process.memory_info()
        if self.track_heap and tracemalloc.is_tracing():
            current, peak = tracemalloc.get_traced_memory()
            return MemoryReading(
                heap_used=current,
                heap_total=peak,
                external=max(0, info.rss - current),
                rss=info.rss,
            )
        return MemoryReading(heap_used=info.rss, heap_total=info.vms, external=0, rss=info.rss)

    def read_cpu_percent(self) -> float:
        return self.process.cpu_percent(interval=None)

    def force_gc(self) -> bool:
        collected = gc.collect()
        logger.debug(f"Forced GC collected {collected} objects")
        return True

    def close(self):
        if self.track_heap and tracemalloc.is_tracing():
            tracemalloc.stop()


class StaticProbe(ResourceProbe):
    """Always reports the same memory and CPU figures"""

    def __init__(self, heap_used: int, cpu_percent: float = 10.0, gc_available: bool = True):
        self.heap_used = heap_used
        self.cpu_percent = cpu_percent
        self.gc_available = gc_available
        self.gc_calls = 0

    def read_memory(self) -> MemoryReading:
        return MemoryReading(self.heap_used, self.heap_used, 0, self.heap_used)

    def read_cpu_percent(self) -> float:
        return self.cpu_percent

    def force_gc(self) -> bool:
        if self.gc_available:
            self.gc_calls += 1
        return self.gc_available


class ScriptedProbe(ResourceProbe):
    """Replays a fixed heap series (and optional CPU series), then holds the last value"""

    def __init__(self, heap_series: Sequence[int], cpu_series: Sequence[float] = (10.0,)):
        if not heap_series:
            raise ValueError("heap_series must not be empty")
        self.heap_series = list(heap_series)
        self.cpu_series = list(cpu_series) or [0.0]
        self._heap_index = 0
        self._cpu_index = 0
        self._lock = threading.Lock()

    def read_memory(self) -> MemoryReading:
        with self._lock:
            value = self.heap_series[min(self._heap_index, len(self.heap_series) - 1)]
            self._heap_index += 1
        return MemoryReading(value, value, 0, value)

    def read_cpu_percent(self) -> float:
        with self._lock:
            value = self.cpu_series[min(self._cpu_index, len(self.cpu_series) - 1)]
            self._cpu_index += 1
        return value
