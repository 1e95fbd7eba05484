#!/usr/bin/env python3
"""
Performance validation entry point.

Loads the harness configuration, runs the complete validation against the
synthetic simulation and writes the report, the benchmark baseline and the
raw series to the configured output directory.

Usage:
    python -m perf_validation.run_validation [--env dev] [--output-dir DIR]
"""
import asyncio
import dataclasses
from pathlib import Path
from typing import Any, Dict

from perf_validation.cli.cli import parse_env_args
from perf_validation.config.config_loader import ConfigLoader
from perf_validation.consts.MetricStatus import MetricStatus
from perf_validation.errors import BaselineError
from perf_validation.models.validation_report import ValidationReport
from perf_validation.service.benchmark.baseline_store import BaselineStore
from perf_validation.service.benchmark.environment import detect_environment
from perf_validation.service.validation.validation_runner import PerformanceValidationRunner
from perf_validation.service.validation.validators import (
    EXTENDED_TEST_NAME,
    MEMORY_TEST_NAME,
    SCALABILITY_TEST_NAME,
)
from perf_validation.util.file_utils import ensure_dir, export_series_csv, write_json
from perf_validation.util.log_config import setup_logger
from perf_validation.util.report_printer import print_report

logger = setup_logger(__name__)


def export_series(raw_results: Dict[str, Any], series_dir: Path) -> int:
    """Write the sample and tick series of every completed run; returns the file count"""
    written = []
    for result in raw_results.get(EXTENDED_TEST_NAME) or []:
        written += export_series_csv(series_dir, result.test_name, result.samples, result.tick_times)
    for result in raw_results.get(MEMORY_TEST_NAME) or []:
        written += export_series_csv(series_dir, result.test_name, samples=result.samples)
    scalability = raw_results.get(SCALABILITY_TEST_NAME)
    if scalability is not None:
        for result in scalability.results:
            written += export_series_csv(series_dir, f"Scalability-{result.entity_count}-Entities",
                                         tick_times=result.tick_times)
    return len(written)


def main() -> int:
    args = parse_env_args("Run the simulation performance validation")

    logger.info("=" * 60)
    logger.info("Starting Performance Validation")
    logger.info("=" * 60)

    config_path = Path(__file__).parent / "config_yaml"
    config = ConfigLoader(config_path, env=args.env).config_data
    if args.env:
        logger.info(f"Loaded configuration with environment override: {args.env}")
    if args.output_dir:
        config = dataclasses.replace(config, output_dir=args.output_dir)

    output_dir = ensure_dir(config.output_dir)
    environment = detect_environment()
    store = BaselineStore(output_dir / config.benchmark.baseline_dir)
    try:
        previous = store.latest(environment, exclude_version=config.benchmark.baseline_version)
    except BaselineError as e:
        logger.warning(f"Ignoring unreadable baselines: {e}")
        previous = None
    if previous is not None:
        logger.info(f"Found previous baseline {previous.version} ({previous.created_at})")

    runner = PerformanceValidationRunner(config, previous_baseline=previous, environment=environment)
    report: ValidationReport = asyncio.run(runner.run_complete_validation())

    logger.info("=" * 60)
    logger.info("Exporting Results")
    logger.info("=" * 60)
    report_path = output_dir / "validation_report.json"
    report.save_to_file(str(report_path))
    logger.info(f"✓ Validation report exported to: {report_path.resolve()}")

    if runner.benchmark_run is not None:
        try:
            store.save(runner.benchmark_run.baseline)
        except BaselineError as e:
            logger.error(f"Baseline not saved: {e}")
        summary_path = write_json(output_dir / "benchmark_summary.json", runner.benchmark_run.summary.to_dict())
        logger.info(f"✓ Benchmark summary exported to: {summary_path.resolve()}")

    if not args.no_series:
        count = export_series(runner.raw_results, output_dir / "series")
        logger.info(f"✓ {count} raw series exported to: {(output_dir / 'series').resolve()}")

    print_report(report, runner.benchmark_run.results if runner.benchmark_run else (), runner.regressions)

    logger.info(f"Overall status: {report.summary.overall_status.value.upper()}")
    return 1 if report.summary.overall_status == MetricStatus.FAIL else 0


if __name__ == "__main__":
    raise SystemExit(main())
