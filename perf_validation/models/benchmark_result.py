"""Benchmark result and baseline data models."""

from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Any, Dict, List
import json

from perf_validation.consts.Grade import Grade
from perf_validation.models.metric import Metric


@dataclass
class Environment:
    """Host description used to key baseline documents"""
    platform: str
    python_version: str
    cpu_cores: int
    total_memory_mb: int
    architecture: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Environment':
        return cls(**data)


@dataclass
class PerformanceScore:
    score: float
    grade: Grade
    breakdown: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "grade": self.grade.value, "breakdown": dict(self.breakdown)}


@dataclass
class BenchmarkResult:
    """
    Result of one benchmark test.

    Metrics are keyed by metric name; `raw_data` holds the scenario output the
    metrics were extracted from.
    """
    test_name: str
    suite: str
    version: str
    environment: Environment
    metrics: Dict[str, Metric]
    performance: PerformanceScore
    raw_data: Any = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self, include_raw: bool = False) -> Dict[str, Any]:
        data = {
            "test_name": self.test_name,
            "suite": self.suite,
            "version": self.version,
            "timestamp": self.timestamp,
            "environment": self.environment.to_dict(),
            "metrics": {name: m.to_dict() for name, m in self.metrics.items()},
            "performance": self.performance.to_dict(),
        }
        if include_raw:
            data["raw_data"] = self.raw_data
        return data


@dataclass
class BaselineEntry:
    metrics: Dict[str, float]
    targets: Dict[str, float]
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BaselineMetadata:
    total_tests: int
    overall_score: float
    critical_path_metrics: List[str] = field(default_factory=list)
    optimization_targets: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BaselineDocument:
    """Expected metric values for one version on one environment"""
    version: str
    created_at: str
    environment: Environment
    baselines: Dict[str, BaselineEntry]
    metadata: BaselineMetadata

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "created_at": self.created_at,
            "environment": self.environment.to_dict(),
            "baselines": {name: entry.to_dict() for name, entry in self.baselines.items()},
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaselineDocument':
        return cls(
            version=data["version"],
            created_at=data["created_at"],
            environment=Environment.from_dict(data["environment"]),
            baselines={name: BaselineEntry(**entry) for name, entry in data["baselines"].items()},
            metadata=BaselineMetadata(**data["metadata"]),
        )

    def save_to_file(self, file_path: str) -> None:
        """Save baseline document to JSON file."""
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)

    @classmethod
    def load_from_file(cls, file_path: str) -> 'BaselineDocument':
        """Load baseline document from JSON file."""
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)


@dataclass
class BenchmarkSummary:
    total_tests: int
    passed_tests: int
    pass_rate: float
    overall_score: float
    performance_breakdown: Dict[str, int]
    critical_issues: List[str]
    recommendations: List[str]
    environment: Environment
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["environment"] = self.environment.to_dict()
        return data


@dataclass
class Regression:
    """A metric whose change from baseline exceeds its category threshold"""
    test_name: str
    metric: str
    category: str  # performance | memory | stability
    baseline: float
    value: float
    regression: float
    threshold: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
