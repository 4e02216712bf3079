"""ParamConfig: Expert defaults for the regionstats pipeline.

This module defines the complete default configuration. ALL pipeline
parameters must have defaults here. No runtime code should define
fallback values - this is the single source of truth for defaults.

The defaults reproduce the province study: VIIRS monthly night-time
lights and Sentinel-5P tropospheric NO2, summed per province for
2019-2024.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from regionstats.schemas.base import RegionStatsBaseModel


VIIRS_MONTHLY = "NOAA/VIIRS/DNB/MONTHLY_V1/VCMCFG"
S5P_NO2 = "COPERNICUS/S5P/OFFL/L3_NO2"

TemporalReducer = Literal["mean", "median", "min", "max", "sum"]
SpatialReducer = Literal["sum", "mean"]


# =============================================================================
# Nested Configuration Models
# =============================================================================

class BoundaryConfig(RegionStatsBaseModel):
    """Region boundary source configuration."""
    path: Optional[str] = None
    identity_column: str = Field("NAME_1", min_length=1)
    layer: Optional[str] = None
    region_label: str = Field("province", min_length=1, description="Region noun used in the default export name")


class SourceConfig(RegionStatsBaseModel):
    """Raster time-series store configuration."""
    path: Optional[str] = None
    crs: Optional[str] = None
    engine: Optional[str] = None


class MetricConfig(RegionStatsBaseModel):
    """One derived metric: which band to reduce and how to name it."""
    output_prefix: str = Field(..., min_length=1)
    source_id: str = Field(..., min_length=1)
    band: str = Field(..., min_length=1)
    scale: float = Field(..., gt=0, description="Ground sampling resolution in metres")
    temporal_reducer: TemporalReducer = "mean"
    spatial_reducer: SpatialReducer = "sum"

    @field_validator("temporal_reducer", "spatial_reducer", mode="before")
    @classmethod
    def normalize_reducer_name(cls, v):
        """Normalize reducer names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class CoordNamesConfig(RegionStatsBaseModel):
    """Coordinate name mappings for raster stores."""
    time: str = "time"
    y: str = "y"
    x: str = "x"


class JoinConfig(RegionStatsBaseModel):
    """Master table join policy."""
    policy: Literal["left", "inner"] = "left"

    @field_validator("policy", mode="before")
    @classmethod
    def normalize_policy(cls, v):
        """Normalize policy names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class ZonalConfig(RegionStatsBaseModel):
    """Zonal aggregation behaviour."""
    uncovered_regions: Literal["emit", "drop"] = "emit"


class ProcessingConfig(RegionStatsBaseModel):
    """Execution settings."""
    workers: int = Field(1, ge=1, le=32)


class ExportConfig(RegionStatsBaseModel):
    """Export sink configuration."""
    format: Literal["csv", "parquet"] = "csv"
    description: Optional[str] = None

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, v):
        """Accept 'CSV' as well as 'csv'."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class LoggingConfig(RegionStatsBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


def default_sources() -> dict[str, SourceConfig]:
    return {
        VIIRS_MONTHLY: SourceConfig(),
        S5P_NO2: SourceConfig(),
    }


def default_metrics() -> list[MetricConfig]:
    return [
        MetricConfig(
            output_prefix="NTL",
            source_id=VIIRS_MONTHLY,
            band="avg_rad",
            scale=500.0,
        ),
        MetricConfig(
            output_prefix="NO2",
            source_id=S5P_NO2,
            band="tropospheric_NO2_column_number_density",
            scale=5000.0,
        ),
    ]


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(RegionStatsBaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all pipeline parameters.
    Every tunable parameter MUST have a default here.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    base_dir: Optional[str] = None
    years: list[int] = Field(default_factory=lambda: [2019, 2020, 2021, 2022, 2023, 2024])
    boundary: BoundaryConfig = Field(default_factory=BoundaryConfig)
    sources: dict[str, SourceConfig] = Field(default_factory=default_sources)
    metrics: list[MetricConfig] = Field(default_factory=default_metrics)
    coord_names: CoordNamesConfig = Field(default_factory=CoordNamesConfig)
    join: JoinConfig = Field(default_factory=JoinConfig)
    zonal: ZonalConfig = Field(default_factory=ZonalConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
