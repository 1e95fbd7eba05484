from enum import Enum


class ScenarioState(Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    WARMING_UP = "warming_up"
    MEASURING = "measuring"
    STOPPING = "stopping"
    ANALYZED = "analyzed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ScenarioState.ANALYZED, ScenarioState.FAILED)
