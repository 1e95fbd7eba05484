from enum import Enum


class SimulationEventType(Enum):
    PERFORMANCE_WARNING = "PERFORMANCE_WARNING"
    PERFORMANCE_CRITICAL = "PERFORMANCE_CRITICAL"
    DEGRADATION_APPLIED = "DEGRADATION_APPLIED"
