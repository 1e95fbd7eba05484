"""Exception hierarchy for the performance validation harness."""


class HarnessError(Exception):
    """Base class for all harness errors."""


class ConfigError(HarnessError):
    """Raised when a configuration file is missing or malformed."""


class CollaboratorError(HarnessError):
    """Raised when the simulation collaborator fails during a lifecycle call."""

    def __init__(self, operation: str, cause: BaseException):
        super().__init__(f"Simulation collaborator failed during {operation}: {cause}")
        self.operation = operation
        self.cause = cause


class ScenarioStateError(HarnessError):
    """Raised on an illegal scenario lifecycle transition."""


class ScenarioTimeoutError(HarnessError):
    """Raised when a scenario run exceeds its supervisory timeout."""

    def __init__(self, run_name: str, timeout_s: float):
        super().__init__(f"Scenario run '{run_name}' exceeded its {timeout_s:.1f}s timeout")
        self.run_name = run_name
        self.timeout_s = timeout_s


class BaselineError(HarnessError):
    """Raised when a baseline document cannot be read or written."""
