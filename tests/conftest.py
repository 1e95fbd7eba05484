import pytest

from perf_validation.models.benchmark_result import Environment


@pytest.fixture
def environment():
    return Environment(
        platform="linux",
        python_version="3.12.0",
        cpu_cores=8,
        total_memory_mb=16384,
        architecture="x86_64",
    )
