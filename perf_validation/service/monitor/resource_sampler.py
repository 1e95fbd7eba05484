"""
Resource Sampler Module

Periodically snapshots process memory and CPU into a time-ordered buffer on a
background thread, independent of simulation tick polling.
"""
import threading
import time
from typing import List, Optional

from perf_validation.models.memory_sample import MemorySample
from perf_validation.service.monitor.resource_probe import ResourceProbe
from perf_validation.util.log_config import setup_logger

logger = setup_logger(__name__)

# Sampling cost above this fraction of the interval is reported
MAX_OVERHEAD_FRACTION = 0.1


class SampleContext:
    """Tick number and entity count stamped onto each sample; updated by the scenario"""

    def __init__(self, tick_number: int = 0, entity_count: int = 0):
        self.tick_number = tick_number
        self.entity_count = entity_count


class SamplerHandle:
    """A running (or finished) sampling session"""

    def __init__(self, interval: float, gc_every: Optional[int]):
        self.interval = interval
        self.gc_every = gc_every
        self.samples: List[MemorySample] = []
        self.stop_event = threading.Event()
        self.thread: Optional[threading.Thread] = None
        self.start_time: Optional[float] = None
        self.max_overhead_s = 0.0
        self.error: Optional[BaseException] = None

    @property
    def stopped(self) -> bool:
        return self.stop_event.is_set()


class ResourceSampler:
    """Sample a ResourceProbe every `interval` seconds until stopped"""

    def __init__(self, probe: ResourceProbe, context: Optional[SampleContext] = None, gc_every: Optional[int] = None):
        """
        Args:
            probe: Source of memory/CPU readings
            context: Tick/entity context stamped on samples
            gc_every: Force a collection before every n-th sample (None disables)
        """
        if gc_every is not None and gc_every < 1:
            raise ValueError(f"gc_every must be >= 1, got {gc_every}")
        self.probe = probe
        self.context = context or SampleContext()
        self.gc_every = gc_every

    def start(self, interval: float) -> SamplerHandle:
        """Start sampling in a background thread and return its handle"""
        if interval <= 0:
            raise ValueError(f"Sampling interval must be positive, got {interval}")
        handle = SamplerHandle(interval, self.gc_every)
        handle.start_time = time.perf_counter()
        handle.thread = threading.Thread(target=self._sample_loop, args=(handle,), daemon=True)
        handle.thread.start()
        return handle

    def stop(self, handle: SamplerHandle) -> List[MemorySample]:
        """
        Stop sampling and return the collected samples.

        Calling stop on an already-stopped handle returns the same samples.
        """
        if not handle.stopped:
            handle.stop_event.set()
            if handle.thread:
                handle.thread.join(timeout=handle.interval + 2.0)
            logger.debug(f"Sampler stopped with {len(handle.samples)} samples")
        return list(handle.samples)

    def _sample_loop(self, handle: SamplerHandle):
        """Main sampling loop (runs in background thread)"""
        index = 0
        warned = False
        while True:
            index += 1
            deadline = handle.start_time + index * handle.interval
            if handle.stop_event.wait(timeout=max(0.0, deadline - time.perf_counter())):
                break
            try:
                began = time.perf_counter()
                sample = self._take_sample(handle, index)
                handle.samples.append(sample)
                overhead = time.perf_counter() - began
            except Exception as e:
                handle.error = e
                logger.warning(f"Sampler error: {e}")
                break

            handle.max_overhead_s = max(handle.max_overhead_s, overhead)
            if not warned and overhead > handle.interval * MAX_OVERHEAD_FRACTION:
                warned = True
                logger.warning(
                    f"Sampling took {overhead * 1000:.1f}ms, over "
                    f"{MAX_OVERHEAD_FRACTION:.0%} of the {handle.interval * 1000:.0f}ms interval"
                )

    def _take_sample(self, handle: SamplerHandle, index: int) -> MemorySample:
        gc_forced = False
        if handle.gc_every is not None and index % handle.gc_every == 0:
            gc_forced = self.probe.force_gc()

        reading = self.probe.read_memory()
        cpu = self.probe.read_cpu_percent()
        return MemorySample(
            timestamp=(time.perf_counter() - handle.start_time) * 1000.0,
            tick_number=self.context.tick_number,
            entity_count=self.context.entity_count,
            heap_used=reading.heap_used,
            heap_total=reading.heap_total,
            external=reading.external,
            rss=reading.rss,
            gc_forced=gc_forced,
            cpu_percent=cpu,
        )
