from enum import Enum


class MetricStatus(Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"
