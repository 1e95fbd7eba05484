from enum import Enum


class ScenarioType(Enum):
    EXTENDED = "extended"
    MEMORY = "memory"
    SCALABILITY = "scalability"
    COMBINED_LOAD = "combined_load"
    TICK_CONSISTENCY = "tick_consistency"
