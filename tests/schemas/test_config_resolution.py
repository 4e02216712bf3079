"""Test config resolution and validation with Pydantic."""

import pytest
from pydantic import ValidationError

from regionstats.schemas import ParamConfig, UserConfig, CLIConfig, InternalConfig
from regionstats.schemas.param import VIIRS_MONTHLY, S5P_NO2
from regionstats.schemas.resolve import resolve_config, deep_merge

pytestmark = pytest.mark.unit


class TestConfigResolution:
    """Test resolve_config() precedence and merging."""

    def test_resolve_config_all_defaults(self):
        """Resolving with no user/CLI overrides uses all ParamConfig defaults."""
        config = resolve_config(ParamConfig(), None, None)

        assert isinstance(config, InternalConfig)
        assert config.years == [2019, 2020, 2021, 2022, 2023, 2024]
        assert config.boundary.identity_column == "NAME_1"
        assert config.join.policy == "left"
        assert config.zonal.uncovered_regions == "emit"
        assert config.export.format == "csv"
        assert config.processing.workers == 1

    def test_default_metrics(self):
        """NTL and NO2 are declared in that order with their native scales."""
        config = resolve_config(ParamConfig(), None, None)

        ntl, no2 = config.metrics
        assert (ntl.output_prefix, ntl.source_id, ntl.band, ntl.scale) == (
            "NTL", VIIRS_MONTHLY, "avg_rad", 500.0
        )
        assert (no2.output_prefix, no2.source_id, no2.scale) == ("NO2", S5P_NO2, 5000.0)
        assert no2.band == "tropospheric_NO2_column_number_density"
        assert ntl.temporal_reducer == no2.temporal_reducer == "mean"
        assert ntl.spatial_reducer == no2.spatial_reducer == "sum"

    def test_user_config_overrides_param_config(self):
        """UserConfig values override ParamConfig defaults."""
        user = UserConfig(YEARS=[2020, 2021], JOIN_POLICY="inner")
        config = resolve_config(ParamConfig(), user, None)

        assert config.years == [2020, 2021]
        assert config.join.policy == "inner"

    def test_precedence_param_user_cli(self):
        """Full precedence: CLI > User > Param."""
        user = UserConfig(YEARS=[2020], BASE_DIR="/user/out", WORKERS=2)
        cli = CLIConfig(years=[2023], workers=4)
        config = resolve_config(ParamConfig(), user, cli)

        assert config.years == [2023]
        assert config.processing.workers == 4
        # User value survives where CLI is silent
        assert config.base_dir == "/user/out"

    def test_dict_inputs_are_accepted(self):
        """Raw dicts are validated into the right models."""
        config = resolve_config({}, {"YEARS": 2022}, {"log_level": "DEBUG"})

        assert config.years == [2022]
        assert config.logging.level == "DEBUG"

    def test_internal_config_is_frozen(self, internal_config):
        """InternalConfig cannot be mutated after resolution."""
        with pytest.raises(ValidationError):
            internal_config.years = [1999]

    def test_source_paths_fill_nested_sources(self):
        """Flat path aliases land in the sources section."""
        user = UserConfig(NTL_PATH="/data/viirs.nc", SOURCE_PATHS={S5P_NO2: "/data/no2.nc"})
        config = resolve_config(ParamConfig(), user, None)

        assert config.sources[VIIRS_MONTHLY].path == "/data/viirs.nc"
        assert config.sources[S5P_NO2].path == "/data/no2.nc"
        assert config.sources[S5P_NO2].crs is None

    def test_user_metrics_replace_defaults(self, make_config):
        """A user metric list replaces the default list and gets defaults filled."""
        config = make_config()

        assert [m.output_prefix for m in config.metrics] == ["NTL", "NO2"]
        assert config.metrics[0].source_id == "ntl"
        assert config.metrics[0].temporal_reducer == "mean"
        assert config.metrics[0].spatial_reducer == "sum"


class TestInternalValidators:
    """Invariants enforced when InternalConfig is built."""

    def test_years_sorted_ascending(self, make_config):
        config = make_config(years=[2021, 2019, 2020])
        assert config.years == [2019, 2020, 2021]

    def test_duplicate_years_rejected(self, make_config):
        with pytest.raises(ValidationError, match="unique"):
            make_config(years=[2019, 2019])

    def test_empty_years_allowed(self, make_config):
        config = make_config(years=[])
        assert config.years == []

    def test_duplicate_prefix_rejected(self, make_config):
        metric = {"output_prefix": "NTL", "source_id": "ntl", "band": "avg_rad", "scale": 1.0}
        with pytest.raises(ValidationError, match="output_prefix"):
            make_config(metrics=[metric, dict(metric)])

    def test_undeclared_source_rejected(self, make_config):
        metric = {"output_prefix": "NTL", "source_id": "missing", "band": "avg_rad", "scale": 1.0}
        with pytest.raises(ValidationError, match="undeclared source"):
            make_config(metrics=[metric])

    def test_non_positive_scale_rejected(self, make_config):
        metric = {"output_prefix": "NTL", "source_id": "ntl", "band": "avg_rad", "scale": 0}
        with pytest.raises(ValidationError):
            make_config(metrics=[metric])

    def test_unknown_reducer_rejected(self, make_config):
        metric = {"output_prefix": "NTL", "source_id": "ntl", "band": "avg_rad",
                  "scale": 1.0, "spatial_reducer": "median"}
        with pytest.raises(ValidationError):
            make_config(metrics=[metric])

    def test_reducer_names_normalized(self, make_config):
        metric = {"output_prefix": "NTL", "source_id": "ntl", "band": "avg_rad",
                  "scale": 1.0, "temporal_reducer": " MEDIAN ", "spatial_reducer": "Mean"}
        config = make_config(metrics=[metric])
        assert config.metrics[0].temporal_reducer == "median"
        assert config.metrics[0].spatial_reducer == "mean"

    def test_workers_bounds(self, make_config):
        with pytest.raises(ValidationError):
            make_config(workers=0)


def test_deep_merge_nested():
    base = {"a": 1, "b": {"c": 2, "d": 3}}
    override = {"b": {"d": 4, "e": 5}, "f": 6}

    assert deep_merge(base, override) == {"a": 1, "b": {"c": 2, "d": 4, "e": 5}, "f": 6}
    # Inputs untouched
    assert base == {"a": 1, "b": {"c": 2, "d": 3}}


def test_deep_merge_replaces_lists():
    assert deep_merge({"years": [2019, 2020]}, {"years": [2024]}) == {"years": [2024]}
