import time

import pytest

from perf_validation.config.test_config import MB
from perf_validation.service.monitor.resource_probe import ScriptedProbe, StaticProbe
from perf_validation.service.monitor.resource_sampler import ResourceSampler, SampleContext


def test_five_to_one_duration_interval_yields_about_five_ordered_samples():
    sampler = ResourceSampler(StaticProbe(100 * MB))
    handle = sampler.start(0.2)
    time.sleep(1.0)
    samples = sampler.stop(handle)

    assert 4 <= len(samples) <= 6
    timestamps = [s.timestamp for s in samples]
    assert timestamps == sorted(timestamps)


def test_stop_is_idempotent():
    sampler = ResourceSampler(StaticProbe(100 * MB))
    handle = sampler.start(0.05)
    time.sleep(0.2)
    first = sampler.stop(handle)
    time.sleep(0.1)
    second = sampler.stop(handle)
    assert first == second
    assert handle.stopped


def test_context_is_stamped_on_samples():
    context = SampleContext(tick_number=12, entity_count=6)
    sampler = ResourceSampler(StaticProbe(50 * MB), context)
    handle = sampler.start(0.05)
    time.sleep(0.2)
    samples = sampler.stop(handle)

    assert samples
    assert all(s.tick_number == 12 and s.entity_count == 6 for s in samples)
    assert all(s.heap_used == 50 * MB for s in samples)


def test_forced_gc_every_n_samples():
    probe = StaticProbe(50 * MB)
    sampler = ResourceSampler(probe, gc_every=2)
    handle = sampler.start(0.05)
    time.sleep(0.33)
    samples = sampler.stop(handle)

    forced = [s.gc_forced for s in samples]
    assert forced[1] is True
    assert forced[0] is False
    assert probe.gc_calls == sum(forced)


def test_gc_unavailable_is_recorded_as_not_forced():
    sampler = ResourceSampler(StaticProbe(50 * MB, gc_available=False), gc_every=1)
    handle = sampler.start(0.05)
    time.sleep(0.2)
    samples = sampler.stop(handle)
    assert samples
    assert not any(s.gc_forced for s in samples)


def test_scripted_probe_replays_series():
    sampler = ResourceSampler(ScriptedProbe([10 * MB, 20 * MB, 30 * MB]))
    handle = sampler.start(0.05)
    time.sleep(0.3)
    samples = sampler.stop(handle)
    assert [s.heap_used for s in samples[:3]] == [10 * MB, 20 * MB, 30 * MB]
    assert all(s.heap_used == 30 * MB for s in samples[3:])


@pytest.mark.parametrize("interval", [0, -1])
def test_invalid_interval_rejected(interval):
    with pytest.raises(ValueError):
        ResourceSampler(StaticProbe(MB)).start(interval)


def test_invalid_gc_every_rejected():
    with pytest.raises(ValueError):
        ResourceSampler(StaticProbe(MB), gc_every=0)
