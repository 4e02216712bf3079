"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict, field_validator, model_validator
from regionstats.schemas.base import RegionStatsBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalBoundaryConfig(RegionStatsBaseModel):
    """Runtime boundary configuration.

    Note: path may be None while configs are merged; the orchestrator only
    needs it when no RegionTable is injected.
    """
    path: Optional[str]
    identity_column: str
    layer: Optional[str]
    region_label: str


class InternalSourceConfig(RegionStatsBaseModel):
    """Runtime raster store configuration."""
    path: Optional[str]
    crs: Optional[str]
    engine: Optional[str]


class InternalMetricConfig(RegionStatsBaseModel):
    """Runtime metric definition."""
    output_prefix: str
    source_id: str
    band: str
    scale: float = Field(gt=0)
    temporal_reducer: Literal["mean", "median", "min", "max", "sum"]
    spatial_reducer: Literal["sum", "mean"]


class InternalCoordNamesConfig(RegionStatsBaseModel):
    """Runtime coordinate name mappings."""
    time: str
    y: str
    x: str


class InternalJoinConfig(RegionStatsBaseModel):
    """Runtime join policy."""
    policy: Literal["left", "inner"]


class InternalZonalConfig(RegionStatsBaseModel):
    """Runtime zonal aggregation behaviour."""
    uncovered_regions: Literal["emit", "drop"]


class InternalProcessingConfig(RegionStatsBaseModel):
    """Runtime execution settings."""
    workers: int = Field(ge=1, le=32)


class InternalExportConfig(RegionStatsBaseModel):
    """Runtime export configuration."""
    format: Literal["csv", "parquet"]
    description: Optional[str]


class InternalLoggingConfig(RegionStatsBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(RegionStatsBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that processing code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.policy = config.join.policy  # NOT .get()
            self.identity = config.boundary.identity_column

    Invariants checked here
    -----------------------
    - years are unique and sorted ascending
    - metric output prefixes are unique (column names cannot collide)
    - every metric names a declared source
    """

    base_dir: Optional[str] = None
    years: list[int]
    boundary: InternalBoundaryConfig
    sources: dict[str, InternalSourceConfig]
    metrics: list[InternalMetricConfig]
    coord_names: InternalCoordNamesConfig
    join: InternalJoinConfig
    zonal: InternalZonalConfig
    processing: InternalProcessingConfig
    export: InternalExportConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )

    @field_validator("years")
    @classmethod
    def sort_unique_years(cls, v):
        """Years are processed in ascending order; duplicates would collide."""
        if len(set(v)) != len(v):
            raise ValueError(f"years must be unique, got {v}")
        return sorted(v)

    @model_validator(mode="after")
    def check_metric_references(self):
        """Metric prefixes must be unique and sources declared."""
        prefixes = [m.output_prefix for m in self.metrics]
        duplicates = sorted({p for p in prefixes if prefixes.count(p) > 1})
        if duplicates:
            raise ValueError(f"metric output_prefix values must be unique: {duplicates}")

        for metric in self.metrics:
            if metric.source_id not in self.sources:
                raise ValueError(
                    f"metric '{metric.output_prefix}' uses undeclared source '{metric.source_id}'"
                )
        return self
