"""
Shared helpers for the command-line entry points.
"""
import argparse
from typing import List, Optional


def build_env_parser(description: Optional[str] = None) -> argparse.ArgumentParser:
    """
    Create an ArgumentParser with the common --env option.

    Args:
        description: Optional parser description shown in CLI help.

    Returns:
        argparse.ArgumentParser: parser preconfigured with the --env argument.
    """
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--env",
        type=str,
        default=None,
        help=(
            "Environment name for configuration override (e.g., 'dev'). "
            "Loads config_<env>.yaml in addition to the base config.yaml."
        ),
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory for the report, baselines and raw series (overrides output_dir from config).",
    )
    parser.add_argument(
        "--no-series",
        action="store_true",
        help="Skip exporting raw sample and tick series to CSV.",
    )
    return parser


def parse_env_args(description: Optional[str] = None, argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments using the common --env option.

    Args:
        description: Optional parser description shown in CLI help.
        argv: Arguments to parse instead of sys.argv.

    Returns:
        argparse.Namespace: parsed arguments containing `env`, `output_dir` and `no_series`.
    """
    parser = build_env_parser(description=description)
    return parser.parse_args(argv)
