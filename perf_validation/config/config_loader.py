"""
Configuration manager for validation runs.

This module provides the ConfigLoader class for loading and validating
harness configuration from YAML files.
"""
import dataclasses
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from perf_validation.config.harness_config import HarnessConfig
from perf_validation.config.test_config import Operation, Thresholds, WindowScenario, WindowType
from perf_validation.consts.Complexity import Complexity
from perf_validation.errors import ConfigError

SCENARIO_SECTIONS = ("soak", "memory", "scalability", "combined_load", "tick_consistency")
TARGET_SECTIONS = ("performance", "memory", "scalability", "regression")
BENCHMARK_KEYS = ("baseline_version", "cooldown_s", "baseline_dir", "use_suite_durations")


class ConfigLoader:

    def __init__(self, config_path: Path, env: Optional[str] = None):
        self.config_path = Path(config_path)
        self.env = env
        self.config_data = self._load_config()

    def _read_yaml(self, file: Path) -> Dict[str, Any]:
        if not file.is_file():
            raise ConfigError(f"Configuration file not found: {file}")
        try:
            with open(file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {file}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Top level of {file} must be a mapping")
        return data

    def _load_config(self) -> HarnessConfig:
        """
        Load and parse harness configuration from YAML file.
        Supports environment-specific overrides via config_<env>.yaml

        Returns:
            HarnessConfig: Configured harness configuration instance
        """
        data = self._read_yaml(self.config_path / "config.yaml")

        if self.env:
            env_data = self._read_yaml(self.config_path / f"config_{self.env}.yaml")
            # Top-level sections in the env file replace the base sections
            data.update(env_data)

        unknown = set(data) - set(SCENARIO_SECTIONS) - {"policy", "validation", "benchmark", "output_dir"}
        if unknown:
            raise ConfigError(f"Unknown configuration sections: {sorted(unknown)}")

        defaults = HarnessConfig()
        overrides: Dict[str, Any] = {}

        for section in SCENARIO_SECTIONS:
            if section in data:
                overrides[section] = _replace(getattr(defaults, section), data[section], section)

        if "policy" in data:
            overrides["policy"] = _replace(defaults.policy, data["policy"], "policy")

        if "validation" in data:
            targets = defaults.validation
            section = _mapping(data["validation"], "validation")
            nested = {}
            for key, value in section.items():
                if key not in TARGET_SECTIONS:
                    raise ConfigError(f"Unknown key 'validation.{key}'")
                nested[key] = _replace(getattr(targets, key), value, f"validation.{key}")
            overrides["validation"] = dataclasses.replace(targets, **nested)

        if "benchmark" in data:
            section = _mapping(data["benchmark"], "benchmark")
            for key in section:
                if key not in BENCHMARK_KEYS:
                    raise ConfigError(f"Unknown key 'benchmark.{key}'")
            overrides["benchmark"] = dataclasses.replace(defaults.benchmark, **section)

        if "output_dir" in data:
            overrides["output_dir"] = str(data["output_dir"])

        return dataclasses.replace(defaults, **overrides)


def _mapping(value: Any, section: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Section '{section}' must be a mapping")
    return value


def _replace(base: Any, value: Any, section: str) -> Any:
    """Return a copy of the frozen dataclass `base` with the YAML mapping applied."""
    section_data = _mapping(value, section)
    names = {f.name for f in dataclasses.fields(base)}
    kwargs = {}
    for key, raw in section_data.items():
        if key not in names:
            raise ConfigError(f"Unknown key '{section}.{key}'")
        if key == "thresholds":
            kwargs[key] = _replace(Thresholds(), raw, f"{section}.thresholds")
        elif key == "window_scenarios":
            kwargs[key] = tuple(_window_scenario(item) for item in raw or [])
        elif isinstance(raw, list):
            kwargs[key] = tuple(raw)
        else:
            kwargs[key] = raw
    try:
        return dataclasses.replace(base, **kwargs)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid values in section '{section}': {e}") from e


def _window_scenario(data: Dict[str, Any]) -> WindowScenario:
    try:
        window_types = tuple(
            WindowType(
                type=w["type"],
                update_frequency=w["update_frequency"],
                data_complexity=Complexity(w.get("data_complexity", "medium")),
                memory_footprint_mb=w.get("memory_footprint_mb", 50.0),
            )
            for w in data["window_types"]
        )
        operations = tuple(Operation(**op) for op in data.get("simultaneous_operations", []))
        return WindowScenario(
            name=data["name"],
            window_count=data.get("window_count", len(window_types)),
            window_types=window_types,
            simultaneous_operations=operations,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid window scenario {data!r}: {e}") from e
