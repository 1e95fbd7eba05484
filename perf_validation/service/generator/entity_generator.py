"""
Synthetic workload entity generation.

One generator serves every scenario; the category split comes from a
DistributionProfile and all randomness comes from a seeded numpy Generator, so
the same seed always produces the same workload.
"""
import math
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import numpy as np


@dataclass(frozen=True)
class DistributionProfile:
    """Named category weights, e.g. 60/25/15. Build with DistributionProfile.builder()."""
    name: str
    categories: Tuple[Tuple[str, float], ...]

    @staticmethod
    def builder(name: str = "custom") -> 'DistributionProfileBuilder':
        return DistributionProfileBuilder(name)

    @property
    def category_names(self) -> List[str]:
        return [name for name, _ in self.categories]

    def apportion(self, count: int) -> Dict[str, int]:
        """
        Split `count` across categories by largest remainder.

        The parts always sum to `count`; once `count` reaches the number of
        categories every category gets at least one.
        """
        if count < 0:
            raise ValueError(f"Entity count must be non-negative, got {count}")
        total_weight = sum(weight for _, weight in self.categories)
        quotas = [(name, count * weight / total_weight) for name, weight in self.categories]
        parts = {name: math.floor(quota) for name, quota in quotas}

        leftover = count - sum(parts.values())
        # Ties go to the category listed first
        by_remainder = sorted(
            range(len(quotas)),
            key=lambda i: (-(quotas[i][1] - math.floor(quotas[i][1])), i),
        )
        for i in by_remainder[:leftover]:
            parts[quotas[i][0]] += 1

        if count >= len(self.categories):
            for name in self.category_names:
                if parts[name] == 0:
                    donor = max(self.category_names, key=lambda n: parts[n])
                    parts[donor] -= 1
                    parts[name] = 1
        return parts


class DistributionProfileBuilder:

    def __init__(self, name: str):
        self._name = name
        self._categories: List[Tuple[str, float]] = []

    def category(self, name: str, weight: float) -> 'DistributionProfileBuilder':
        if weight <= 0:
            raise ValueError(f"Category weight must be positive, got {weight} for '{name}'")
        if any(existing == name for existing, _ in self._categories):
            raise ValueError(f"Duplicate category '{name}'")
        self._categories.append((name, float(weight)))
        return self

    def build(self) -> DistributionProfile:
        if not self._categories:
            raise ValueError("A distribution profile needs at least one category")
        return DistributionProfile(self._name, tuple(self._categories))


STANDARD_PROFILE = (
    DistributionProfile.builder("standard")
    .category("actor", 60)
    .category("group", 25)
    .category("rule", 15)
    .build()
)

SCALABILITY_PROFILE = (
    DistributionProfile.builder("scalability")
    .category("actor", 70)
    .category("group", 20)
    .category("rule", 10)
    .build()
)


@dataclass(frozen=True)
class WorkloadEntity:
    id: str
    category: str
    vector: Tuple[float, float]  # position in a 2-d attribute space, each axis in [-100, 100]
    resources: float  # [0, 100]
    activity: float  # [0.5, 1.5), scales the simulated per-tick cost of the entity


@dataclass
class WorkloadEntities:
    """Generated entities grouped by category"""
    profile: str
    by_category: Dict[str, List[WorkloadEntity]] = field(default_factory=dict)

    def __len__(self) -> int:
        return sum(len(v) for v in self.by_category.values())

    def counts(self) -> Dict[str, int]:
        return {name: len(v) for name, v in self.by_category.items()}

    def all(self) -> List[WorkloadEntity]:
        return [e for entities in self.by_category.values() for e in entities]


class EntityGenerator:
    """Seeded generator of workload entities; ids stay unique across calls"""

    def __init__(self, seed: int = 42):
        self.seed = seed
        self._rng = np.random.default_rng(seed)
        self._next_id = 0

    def generate(self, count: int, profile: DistributionProfile = STANDARD_PROFILE) -> WorkloadEntities:
        parts = profile.apportion(count)
        result = WorkloadEntities(profile=profile.name)
        for category in profile.category_names:
            result.by_category[category] = [self._make(category) for _ in range(parts[category])]
        return result

    def _make(self, category: str) -> WorkloadEntity:
        entity_id = f"{category}-{self.seed}-{self._next_id}"
        self._next_id += 1
        vector = self._rng.uniform(-100.0, 100.0, size=2)
        return WorkloadEntity(
            id=entity_id,
            category=category,
            vector=(float(vector[0]), float(vector[1])),
            resources=float(self._rng.uniform(0.0, 100.0)),
            activity=float(self._rng.uniform(0.5, 1.5)),
        )
