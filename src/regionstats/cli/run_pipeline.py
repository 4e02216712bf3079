"""Core regionstats pipeline execution logic.

This module contains the actual pipeline runner, separated from argument parsing.
Scripts are thin wrappers; this is the real implementation.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Dict, Any

from pydantic import ValidationError

from regionstats.contracts import ContractViolation, MetricComputationError, SourceUnavailableError
from regionstats.pipeline.orchestrator import PipelineOrchestrator
from regionstats.schemas.initialization import init_runtime_config, load_user_config_dict

__all__ = ['run_regionstats_pipeline', 'build_parser', 'main']

logger = logging.getLogger(__name__)


def run_regionstats_pipeline(
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    rerun: bool = False,
    verbose: bool = False
) -> Path:
    """Execute the regionstats pipeline and return the exported table path.

    This is the core pipeline execution function. It:
    1. Loads and resolves configuration (Param < User < CLI)
    2. Optionally cleans the output directory if rerun=True
    3. Sets up output directories and saves the runtime config
    4. Runs the orchestrator until every year is merged and exported

    Parameters
    ----------
    user_config_path : str, optional
        Path to user config file (Python file with CONFIG dict). Without
        one, only the expert defaults and CLI overrides apply.
    cli_args : dict, optional
        CLI argument overrides. Keys: years, base_dir, join_policy,
        workers, log_level. All optional.
    rerun : bool, optional
        If True, delete the output directory before running.
    verbose : bool, optional
        If True, enable DEBUG logging and print full resolved config.

    Returns
    -------
    Path
        The exported CSV or Parquet file.

    Raises
    ------
    FileNotFoundError
        If user_config_path does not exist.
    pydantic.ValidationError
        If configuration validation fails.
    MetricComputationError
        If a (metric, year) could not be computed.

    Examples
    --------
    Run with user config only::

        run_regionstats_pipeline("scripts/user_config.py")

    Run with CLI overrides::

        run_regionstats_pipeline(
            "scripts/user_config.py",
            cli_args={"years": "2019-2021", "join_policy": "inner"},
        )
    """
    user_cfg_dict = load_user_config_dict(user_config_path) if user_config_path else {}

    cli_args = dict(cli_args or {})
    if verbose and cli_args.get("log_level") is None:
        cli_args["log_level"] = "DEBUG"

    config, output_dirs, run_id = init_runtime_config(user_cfg_dict, cli_args, rerun=rerun)

    # Print summary
    print(f"\n{'='*60}")
    print("regionstats: yearly raster metrics per region")
    print('='*60)
    print(f"Config:  {user_config_path or '(defaults)'}")
    print(f"Run ID:  {run_id}")
    print(f"Years:   {config.years}")
    print(f"Metrics: {[m.output_prefix for m in config.metrics]}")
    print(f"Join:    {config.join.policy}")
    print(f"Output:  {output_dirs['base']}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2))
        print('='*60)

    orchestrator = PipelineOrchestrator(config, output_dirs)
    return orchestrator.start()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sum yearly raster metrics per region and merge them into one table"
    )
    parser.add_argument("config", nargs="?", help="Path to user config file")
    parser.add_argument("--years", help="Years to process, e.g. 2019-2024 or 2019,2021")
    parser.add_argument("--base-dir", help="Output directory")
    parser.add_argument("--join-policy", choices=["left", "inner"], help="Master table join policy")
    parser.add_argument("--workers", type=int, help="Parallel (year, metric) computations")
    parser.add_argument("--rerun", action="store_true", help="Delete output directory before running")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    """Console entry point."""
    args = build_parser().parse_args(argv)

    cli_args = {
        "years": args.years,
        "base_dir": args.base_dir,
        "join_policy": args.join_policy,
        "workers": args.workers,
    }

    try:
        path = run_regionstats_pipeline(args.config, cli_args, rerun=args.rerun, verbose=args.verbose)
    except (FileNotFoundError, ValidationError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except (MetricComputationError, SourceUnavailableError, ContractViolation) as e:
        print(f"Pipeline failed: {e}", file=sys.stderr)
        return 1

    print(f"Exported: {path}")
    return 0
