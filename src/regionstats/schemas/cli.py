"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: years, output path, join policy, workers, verbosity.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from pydantic import field_validator
from regionstats.schemas.base import RegionStatsBaseModel


class CLIConfig(RegionStatsBaseModel):
    """Command-line configuration overrides.

    Operational-only settings that override user and param configs.
    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(
            years=[2023, 2024],
            base_dir="/scratch/regionstats_output",
            join_policy="inner",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    years: Optional[list[int]] = None
    base_dir: Optional[str] = None
    join_policy: Optional[Literal["left", "inner"]] = None
    workers: Optional[int] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    @field_validator("years", mode="before")
    @classmethod
    def parse_years(cls, v):
        """Accept '2019,2020', '2019-2024' or a list of ints."""
        if v is None or isinstance(v, list):
            return v
        if isinstance(v, int):
            return [v]
        text = str(v).strip()
        if "-" in text and "," not in text:
            first, last = (int(part) for part in text.split("-", 1))
            return list(range(first, last + 1))
        return [int(part) for part in text.split(",") if part.strip()]

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.years is not None:
            overrides["years"] = list(self.years)

        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)

        if self.join_policy is not None:
            overrides["join"] = {"policy": self.join_policy}

        if self.workers is not None:
            overrides["processing"] = {"workers": self.workers}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
