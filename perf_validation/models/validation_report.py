"""Validation report data models."""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple
import json

from perf_validation.consts.MetricStatus import MetricStatus


@dataclass(frozen=True)
class ValidationMetric:
    value: float
    target: float
    status: MetricStatus
    unit: str

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "target": self.target, "status": self.status.value, "unit": self.unit}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ValidationMetric':
        return cls(data["value"], data["target"], MetricStatus(data["status"]), data["unit"])


@dataclass(frozen=True)
class ValidationResult:
    test_name: str
    status: MetricStatus
    metrics: Mapping[str, ValidationMetric]
    details: Any = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def __post_init__(self):
        # read-only view over a private copy
        object.__setattr__(self, "metrics", MappingProxyType(dict(self.metrics)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "test_name": self.test_name,
            "status": self.status.value,
            "metrics": {name: m.to_dict() for name, m in self.metrics.items()},
            "details": self.details,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ValidationResult':
        return cls(
            test_name=data["test_name"],
            status=MetricStatus(data["status"]),
            metrics={name: ValidationMetric.from_dict(m) for name, m in data["metrics"].items()},
            details=data.get("details"),
            timestamp=data["timestamp"],
        )


@dataclass(frozen=True)
class ValidationSummary:
    total_tests: int
    passed_tests: int
    failed_tests: int
    overall_status: MetricStatus
    overall_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_tests": self.total_tests,
            "passed_tests": self.passed_tests,
            "failed_tests": self.failed_tests,
            "overall_status": self.overall_status.value,
            "overall_score": self.overall_score,
        }


@dataclass(frozen=True)
class ValidationReport:
    """
    Terminal artifact of a full validation run.

    The report is frozen; `test_results`, `recommendations` and `next_steps`
    are stored as tuples.
    """
    summary: ValidationSummary
    test_results: Tuple[ValidationResult, ...]
    performance_baselines: Optional[Dict[str, Any]]
    recommendations: Tuple[str, ...]
    next_steps: Tuple[str, ...]
    metadata: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "test_results": [r.to_dict() for r in self.test_results],
            "performance_baselines": self.performance_baselines,
            "recommendations": list(self.recommendations),
            "next_steps": list(self.next_steps),
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ValidationReport':
        summary = data["summary"]
        return cls(
            summary=ValidationSummary(
                total_tests=summary["total_tests"],
                passed_tests=summary["passed_tests"],
                failed_tests=summary["failed_tests"],
                overall_status=MetricStatus(summary["overall_status"]),
                overall_score=summary["overall_score"],
            ),
            test_results=tuple(ValidationResult.from_dict(r) for r in data["test_results"]),
            performance_baselines=data.get("performance_baselines"),
            recommendations=tuple(data["recommendations"]),
            next_steps=tuple(data["next_steps"]),
            metadata=data["metadata"],
        )

    def save_to_file(self, file_path: str) -> None:
        """Save validation report to JSON file."""
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)

    @classmethod
    def load_from_file(cls, file_path: str) -> 'ValidationReport':
        """Load validation report from JSON file."""
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def failed_results(self) -> List[ValidationResult]:
        return [r for r in self.test_results if r.status == MetricStatus.FAIL]
