import hashlib
import json
import os
import platform
import sys

import psutil

from perf_validation.config.test_config import MB
from perf_validation.models.benchmark_result import Environment


def detect_environment() -> Environment:
    """Describe the host the benchmark runs on"""
    return Environment(
        platform=sys.platform,
        python_version=platform.python_version(),
        cpu_cores=os.cpu_count() or 1,
        total_memory_mb=int(psutil.virtual_memory().total // MB),
        architecture=platform.machine(),
    )


def fingerprint(environment: Environment) -> str:
    """Short stable hash of the environment, used to key baseline files"""
    payload = json.dumps(environment.to_dict(), sort_keys=True)
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()[:12]
