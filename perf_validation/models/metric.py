from dataclasses import dataclass
from typing import Any, Dict, Optional

from perf_validation.consts.MetricStatus import MetricStatus


@dataclass
class Metric:
    """A judged quantity: value, unit and pass/warn/fail status"""
    value: float
    unit: str
    status: MetricStatus
    baseline: Optional[float] = None
    regression: Optional[float] = None  # % change relative to baseline
    # Set when the unit has no known direction and the status defaulted to pass
    ambiguous: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "value": self.value,
            "unit": self.unit,
            "status": self.status.value,
        }
        if self.baseline is not None:
            data["baseline"] = self.baseline
        if self.regression is not None:
            data["regression"] = self.regression
        if self.ambiguous:
            data["ambiguous"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Metric':
        return cls(
            value=data["value"],
            unit=data["unit"],
            status=MetricStatus(data["status"]),
            baseline=data.get("baseline"),
            regression=data.get("regression"),
            ambiguous=data.get("ambiguous", False),
        )
