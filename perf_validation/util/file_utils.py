import json
import re
from pathlib import Path
from typing import Any, Iterable, List, Sequence

import pandas as pd

from perf_validation.models.memory_sample import MemorySample


def ensure_dir(path: Path | str) -> Path:
    path_obj = Path(path)
    path_obj.mkdir(parents=True, exist_ok=True)
    return path_obj


def safe_name(name: str) -> str:
    """File-system friendly form of a run name, e.g. 'Extended-4-Entities' -> 'extended_4_entities'"""
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def write_json(path: Path | str, data: Any) -> Path:
    path_obj = Path(path)
    ensure_dir(path_obj.parent)
    with open(path_obj, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    return path_obj


def samples_frame(samples: Iterable[MemorySample]) -> pd.DataFrame:
    """Memory samples as a DataFrame, one row per sample"""
    columns = list(MemorySample.__dataclass_fields__)
    return pd.DataFrame([s.to_dict() for s in samples], columns=columns)


def tick_frame(tick_times: Sequence[float]) -> pd.DataFrame:
    return pd.DataFrame({"tick": range(1, len(tick_times) + 1), "tick_time_ms": list(tick_times)})


def export_series_csv(out_dir: Path | str, run_name: str,
                      samples: Sequence[MemorySample] = (),
                      tick_times: Sequence[float] = ()) -> List[Path]:
    """
    Write a run's raw series to CSV.

    Samples go to <run>_samples.csv and tick durations to <run>_ticks.csv;
    empty series are skipped.

    Returns:
        Paths of the files written
    """
    out = ensure_dir(out_dir)
    stem = safe_name(run_name)
    written = []
    if samples:
        path = out / f"{stem}_samples.csv"
        samples_frame(samples).to_csv(path, index=False)
        written.append(path)
    if tick_times:
        path = out / f"{stem}_ticks.csv"
        tick_frame(tick_times).to_csv(path, index=False)
        written.append(path)
    return written
