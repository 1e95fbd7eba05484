import json

import pandas as pd

from perf_validation.cli.cli import parse_env_args
from perf_validation.util.file_utils import export_series_csv, safe_name, write_json
from helpers import make_samples


def test_safe_name():
    assert safe_name("Extended-4-Entities") == "extended_4_entities"
    assert safe_name("Combined Load - Dual Window Setup") == "combined_load_dual_window_setup"


def test_write_json_creates_parent(tmp_path):
    path = write_json(tmp_path / "nested" / "out.json", {"a": 1})
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": 1}


def test_export_series_csv(tmp_path):
    written = export_series_csv(tmp_path, "Memory Leak Test",
                                samples=make_samples([100, 110, 120]), tick_times=[1.5, 2.5])
    assert [p.name for p in written] == ["memory_leak_test_samples.csv", "memory_leak_test_ticks.csv"]

    samples = pd.read_csv(written[0])
    assert len(samples) == 3
    assert "heap_used" in samples.columns
    ticks = pd.read_csv(written[1])
    assert list(ticks["tick"]) == [1, 2]
    assert list(ticks["tick_time_ms"]) == [1.5, 2.5]


def test_empty_series_are_skipped(tmp_path):
    assert export_series_csv(tmp_path, "empty") == []


def test_cli_arguments():
    args = parse_env_args(argv=["--env", "dev", "--output-dir", "out", "--no-series"])
    assert args.env == "dev"
    assert args.output_dir == "out"
    assert args.no_series is True
    defaults = parse_env_args(argv=[])
    assert defaults.env is None
    assert defaults.no_series is False
