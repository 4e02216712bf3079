"""Complete runtime initialization for the regionstats pipeline.

This module handles ALL initialization responsibilities:
- Configuration resolution (CLI > User > Param)
- Cleanup handling (--rerun)
- Output directory setup
- Configuration persistence with run ID
"""

import importlib.util
import json
import logging
import shutil
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from regionstats.schemas.resolve import resolve_config
from regionstats.schemas.param import ParamConfig
from regionstats.schemas.user import UserConfig
from regionstats.schemas.cli import CLIConfig
from regionstats.schemas.internal import InternalConfig
from regionstats.setup_directories import setup_output_directories

logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ImportError
        If the file cannot be loaded as a module.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load config module from {path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    # Find CONFIG dict
    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def generate_run_id() -> str:
    """Unique, sortable run identifier, e.g. ``20240102_030405_1a2b3c``."""
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"{stamp}_{uuid.uuid4().hex[:6]}"


def _handle_rerun_cleanup(base_dir: Optional[str], rerun: bool) -> None:
    """Handle --rerun directory cleanup if requested."""
    if not rerun or base_dir is None:
        return

    base_dir_path = Path(base_dir).expanduser()
    if base_dir_path.exists():
        logger.info("Cleaning output directory: %s", base_dir_path)
        shutil.rmtree(base_dir_path)


def persist_runtime_config(config: InternalConfig, run_id: str, output_dirs: dict) -> Path:
    """Persist final runtime configuration to output directory with run ID.

    Saves the complete resolved configuration for reproducibility and debugging.
    """
    config_output_dir = Path(output_dirs["base"])
    config_output_dir.mkdir(parents=True, exist_ok=True)

    config_file = config_output_dir / f"runtime_config_{run_id}.json"

    config_dict = config.model_dump()
    config_dict["run_id"] = run_id
    config_dict["created_at"] = datetime.now(timezone.utc).isoformat()

    with open(config_file, 'w') as f:
        json.dump(config_dict, f, indent=2, default=str)

    logger.info("Runtime config saved: %s", config_file)
    return config_file


def init_runtime_config(
    user_config: Optional[dict] = None,
    cli_args: Optional[dict[str, Any]] = None,
    rerun: bool = False,
) -> tuple[InternalConfig, dict, str]:
    """Complete runtime initialization - single entry point for regionstats.

    1. Configuration resolution (CLI > User > Param)
    2. Cleanup handling (--rerun)
    3. Output directory setup
    4. Configuration persistence with run ID

    Parameters
    ----------
    user_config : dict, optional
        Raw user configuration (the CONFIG dict of a user config file).
    cli_args : dict, optional
        Command-line overrides; None values are ignored.
    rerun : bool
        If True, delete ``base_dir`` before creating the output layout.

    Returns
    -------
    tuple
        ``(config, output_dirs, run_id)``

    Examples
    --------
    >>> config, output_dirs, run_id = init_runtime_config(
    ...     load_user_config_dict("scripts/user_config.py"),
    ...     {"years": "2019-2020"},
    ... )
    """
    cli_dict = {k: v for k, v in (cli_args or {}).items() if v is not None}

    config = resolve_config(
        ParamConfig(),
        UserConfig.model_validate(user_config or {}),
        CLIConfig.model_validate(cli_dict),
    )

    _handle_rerun_cleanup(config.base_dir, rerun)
    output_dirs = setup_output_directories(config.base_dir)

    run_id = generate_run_id()
    persist_runtime_config(config, run_id, output_dirs)

    return config, output_dirs, run_id


__all__ = [
    'init_runtime_config',
    'load_user_config_dict',
    'persist_runtime_config',
    'generate_run_id',
]
