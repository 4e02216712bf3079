"""
Directory setup for the regionstats pipeline.

One flat layout per base directory:
- exports/  final region tables (CSV or Parquet)
- logs/     one log file per run
- base/     runtime config snapshots (runtime_config_<run_id>.json)
"""

import logging
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


def setup_output_directories(base_output_dir: Optional[Union[str, Path]] = None) -> dict[str, Path]:
    """
    Set up the output directory structure.

    Parameters
    ----------
    base_output_dir : str or Path, optional
        Base output directory. If None, ``./output`` in the current
        working directory is used.

    Returns
    -------
    dict
        Dictionary with paths: 'base', 'exports', 'logs'
    """
    if base_output_dir is None:
        base_output_dir = Path.cwd() / "output"

    base_output_dir = Path(base_output_dir).expanduser().resolve()

    directories = {
        "base": base_output_dir,
        "exports": base_output_dir / "exports",
        "logs": base_output_dir / "logs",
    }

    for path in directories.values():
        path.mkdir(parents=True, exist_ok=True)

    for key, path in directories.items():
        logger.debug("  %-8s: %s", key, path)

    return directories


def get_log_path(output_dirs: dict, run_name: str) -> Path:
    """
    Get the log file path for one run.

    Returns
    -------
    Path
        ``logs/regionstats_<run_name>.log``
    """
    log_dir = Path(output_dirs["logs"])
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"regionstats_{run_name}.log"
