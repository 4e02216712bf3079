"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., YEARS → years, BASE_DIR → base_dir).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient to accept
both uppercase and lowercase keys, a single year or a list, etc.
"""

from typing import Literal, Optional, Any
from pydantic import Field, field_validator
from regionstats.schemas.base import RegionStatsBaseModel
from regionstats.schemas.param import VIIRS_MONTHLY, S5P_NO2


class UserBoundaryConfig(RegionStatsBaseModel):
    """User-facing boundary config."""
    path: Optional[str] = None
    identity_column: Optional[str] = None
    layer: Optional[str] = None
    region_label: Optional[str] = None


class UserSourceConfig(RegionStatsBaseModel):
    """User-facing raster store config."""
    path: Optional[str] = None
    crs: Optional[str] = None
    engine: Optional[str] = None


class UserExportConfig(RegionStatsBaseModel):
    """User-facing export config."""
    format: Optional[str] = None
    description: Optional[str] = None

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, v):
        """Normalize format names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserConfig(RegionStatsBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    This config is converted to internal overrides during resolution.

    Usage
    -----
        user_cfg = UserConfig(
            years=[2019, 2020],
            boundary_path="/data/prov.shp",
            source_paths={"NOAA/VIIRS/DNB/MONTHLY_V1/VCMCFG": "/data/viirs.nc"},
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Top-level operational settings
    base_dir: Optional[str] = Field(None, alias="BASE_DIR")
    years: Optional[list[int]] = Field(None, alias="YEARS")

    # Boundary settings (flat aliases)
    boundary_path: Optional[str] = Field(None, alias="BOUNDARY_PATH")
    identity_column: Optional[str] = Field(None, alias="IDENTITY_COLUMN")
    boundary_layer: Optional[str] = Field(None, alias="BOUNDARY_LAYER")
    region_label: Optional[str] = Field(None, alias="REGION_LABEL")

    # Raster stores: source_id -> path, plus shortcuts for the default stores
    source_paths: Optional[dict[str, str]] = Field(None, alias="SOURCE_PATHS")
    ntl_path: Optional[str] = Field(None, alias="NTL_PATH")
    no2_path: Optional[str] = Field(None, alias="NO2_PATH")

    # Accumulation and execution
    join_policy: Optional[Literal["left", "inner"]] = Field(None, alias="JOIN_POLICY")
    uncovered_regions: Optional[Literal["emit", "drop"]] = Field(None, alias="UNCOVERED_REGIONS")
    workers: Optional[int] = Field(None, alias="WORKERS")

    # Export
    export_format: Optional[str] = Field(None, alias="EXPORT_FORMAT")
    export_description: Optional[str] = Field(None, alias="EXPORT_DESCRIPTION")

    # Nested overrides (advanced users)
    boundary: Optional[UserBoundaryConfig] = None
    sources: Optional[dict[str, UserSourceConfig]] = None
    metrics: Optional[list[dict[str, Any]]] = None
    coord_names: Optional[dict[str, str]] = None
    export: Optional[UserExportConfig] = None

    model_config = RegionStatsBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("years", mode="before")
    @classmethod
    def coerce_years(cls, v):
        """Accept a single year, a range, or any iterable of years."""
        if v is None:
            return v
        if isinstance(v, (int, str)):
            return [int(v)]
        return [int(y) for y in v]

    @field_validator("join_policy", "uncovered_regions", mode="before")
    @classmethod
    def normalize_choice(cls, v):
        """Normalize choice values to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("export_format", mode="before")
    @classmethod
    def normalize_export_format(cls, v):
        """Accept 'CSV' as well as 'csv'."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)
        if self.years is not None:
            overrides["years"] = list(self.years)

        # Boundary section
        boundary = {}
        if self.boundary_path is not None:
            boundary["path"] = self.boundary_path
        if self.identity_column is not None:
            boundary["identity_column"] = self.identity_column
        if self.boundary_layer is not None:
            boundary["layer"] = self.boundary_layer
        if self.region_label is not None:
            boundary["region_label"] = self.region_label

        # Merge with explicit boundary config
        if self.boundary is not None:
            boundary.update(self.boundary.model_dump(exclude_none=True))

        if boundary:
            overrides["boundary"] = boundary

        # Sources section
        sources = {}
        if self.ntl_path is not None:
            sources[VIIRS_MONTHLY] = {"path": self.ntl_path}
        if self.no2_path is not None:
            sources[S5P_NO2] = {"path": self.no2_path}
        if self.source_paths is not None:
            for source_id, path in self.source_paths.items():
                sources[source_id] = {"path": path}

        if self.sources is not None:
            for source_id, source_cfg in self.sources.items():
                entry = sources.setdefault(source_id, {})
                entry.update(source_cfg.model_dump(exclude_none=True))

        if sources:
            overrides["sources"] = sources

        # Metrics replace the default list wholesale
        if self.metrics is not None:
            overrides["metrics"] = list(self.metrics)

        if self.coord_names is not None:
            overrides["coord_names"] = dict(self.coord_names)

        if self.join_policy is not None:
            overrides["join"] = {"policy": self.join_policy}
        if self.uncovered_regions is not None:
            overrides["zonal"] = {"uncovered_regions": self.uncovered_regions}
        if self.workers is not None:
            overrides["processing"] = {"workers": self.workers}

        # Export section
        export = {}
        if self.export_format is not None:
            export["format"] = self.export_format
        if self.export_description is not None:
            export["description"] = self.export_description

        # Merge with explicit export config
        if self.export is not None:
            export.update(self.export.model_dump(exclude_none=True))

        if export:
            overrides["export"] = export

        return overrides
