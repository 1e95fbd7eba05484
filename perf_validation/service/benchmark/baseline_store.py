"""
Baseline Store

Keeps one BaselineDocument per (version, environment fingerprint) as a JSON
file under a baseline directory, so later runs can compute regression.
"""
import json
import re
from pathlib import Path
from typing import List, Optional

from perf_validation.errors import BaselineError
from perf_validation.models.benchmark_result import BaselineDocument, Environment
from perf_validation.service.benchmark.environment import fingerprint
from perf_validation.util.log_config import setup_logger

logger = setup_logger(__name__)


class BaselineStore:

    def __init__(self, baseline_dir: Path | str):
        self.baseline_dir = Path(baseline_dir)

    def path_for(self, version: str, environment: Environment) -> Path:
        safe_version = re.sub(r"[^A-Za-z0-9._-]", "_", version)
        return self.baseline_dir / f"baseline_{safe_version}_{fingerprint(environment)}.json"

    def save(self, document: BaselineDocument) -> Path:
        path = self.path_for(document.version, document.environment)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            document.save_to_file(str(path))
        except OSError as e:
            raise BaselineError(f"Cannot write baseline {path}: {e}") from e
        logger.info(f"✓ Baseline {document.version} saved to {path}")
        return path

    def load(self, version: str, environment: Environment) -> Optional[BaselineDocument]:
        """Load the baseline for this version and environment, or None if there is none"""
        path = self.path_for(version, environment)
        if not path.exists():
            return None
        return self._read(path)

    def list_for(self, environment: Environment) -> List[BaselineDocument]:
        """All baselines recorded on this environment, oldest first"""
        if not self.baseline_dir.is_dir():
            return []
        suffix = f"_{fingerprint(environment)}.json"
        documents = [self._read(p) for p in sorted(self.baseline_dir.glob("baseline_*.json"))
                     if p.name.endswith(suffix)]
        return sorted(documents, key=lambda d: d.created_at)

    def latest(self, environment: Environment, exclude_version: Optional[str] = None) -> Optional[BaselineDocument]:
        candidates = [d for d in self.list_for(environment) if d.version != exclude_version]
        return candidates[-1] if candidates else None

    def _read(self, path: Path) -> BaselineDocument:
        try:
            return BaselineDocument.load_from_file(str(path))
        except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
            raise BaselineError(f"Cannot read baseline {path}: {e}") from e
