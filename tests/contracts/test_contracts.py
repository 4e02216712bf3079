"""Tests for pipeline contracts.

These tests verify that contracts are enforced at stage boundaries.
They test contract violations directly, without defensive logic downstream.
"""

import numpy as np
import pandas as pd
import pytest
import xarray as xr

pytestmark = pytest.mark.unit

from regionstats.contracts import (
    ContractViolation,
    MetricComputationError,
    SourceUnavailableError,
    require,
    assert_region_table,
    assert_collapsed,
    assert_metric_year_table,
    assert_master_table,
    assert_rows_preserved,
)
from regionstats.contracts.invariants import PIPELINE_INVARIANTS, STAGE_REQUIREMENTS


class TestRequire:

    def test_passes_silently(self):
        require(True, "never raised")

    def test_raises_contract_violation(self):
        with pytest.raises(ContractViolation, match="broken"):
            require(False, "broken")

    def test_contract_violation_is_runtime_error(self):
        assert issubclass(ContractViolation, RuntimeError)


class TestRegionContract:

    def test_passes_with_unique_identities(self):
        assert_region_table(pd.DataFrame({"NAME_1": ["A", "B"]}), "NAME_1")

    def test_fails_without_identity_column(self):
        with pytest.raises(ContractViolation, match="missing identity column 'NAME_1'"):
            assert_region_table(pd.DataFrame({"NAME": ["A"]}), "NAME_1")

    def test_fails_with_null_identity(self):
        with pytest.raises(ContractViolation, match="1 null identities"):
            assert_region_table(pd.DataFrame({"NAME_1": ["A", None]}), "NAME_1")

    def test_fails_with_duplicate_identity(self):
        with pytest.raises(ContractViolation, match="duplicate identities \\['A'\\]"):
            assert_region_table(pd.DataFrame({"NAME_1": ["A", "B", "A"]}), "NAME_1")


class TestRasterContract:

    def test_passes_with_2d_raster(self):
        raster = xr.DataArray(np.ones((2, 3)), dims=("y", "x"))
        assert_collapsed(raster, "y", "x")

    def test_fails_with_time_dimension(self):
        raster = xr.DataArray(np.ones((1, 2, 3)), dims=("time", "y", "x"))
        with pytest.raises(ContractViolation, match="dims"):
            assert_collapsed(raster, "y", "x")

    def test_fails_with_swapped_dimensions(self):
        raster = xr.DataArray(np.ones((3, 2)), dims=("x", "y"))
        with pytest.raises(ContractViolation):
            assert_collapsed(raster, "y", "x")

    def test_fails_with_dataset(self):
        ds = xr.Dataset({"avg_rad": (("y", "x"), np.ones((2, 2)))})
        with pytest.raises(ContractViolation, match="expected DataArray"):
            assert_collapsed(ds, "y", "x")


class TestMetricYearContract:

    def test_passes_with_identity_and_float_value(self):
        frame = pd.DataFrame({"NAME_1": ["A", "B"], "NTL_2019": [1.0, np.nan]})
        assert_metric_year_table(frame, "NAME_1", "NTL_2019")

    def test_fails_with_extra_column(self):
        frame = pd.DataFrame({"NAME_1": ["A"], "NTL_2019": [1.0], "sum": [1.0]})
        with pytest.raises(ContractViolation, match="columns"):
            assert_metric_year_table(frame, "NAME_1", "NTL_2019")

    def test_fails_with_generic_value_name(self):
        frame = pd.DataFrame({"NAME_1": ["A"], "sum": [1.0]})
        with pytest.raises(ContractViolation):
            assert_metric_year_table(frame, "NAME_1", "NTL_2019")

    def test_fails_with_duplicate_identity(self):
        frame = pd.DataFrame({"NAME_1": ["A", "A"], "NTL_2019": [1.0, 2.0]})
        with pytest.raises(ContractViolation, match="duplicate identities"):
            assert_metric_year_table(frame, "NAME_1", "NTL_2019")

    def test_fails_with_non_float_values(self):
        frame = pd.DataFrame({"NAME_1": ["A"], "NTL_2019": ["1.0"]})
        with pytest.raises(ContractViolation, match="expected float"):
            assert_metric_year_table(frame, "NAME_1", "NTL_2019")


class TestMasterContract:

    def test_passes_identity_only(self):
        assert_master_table(pd.DataFrame({"NAME_1": ["A"]}), "NAME_1", ())

    def test_fails_when_layout_differs_from_schema(self):
        frame = pd.DataFrame({"NAME_1": ["A"], "NO2_2019": [1.0], "NTL_2019": [2.0]})
        with pytest.raises(ContractViolation, match="expected"):
            assert_master_table(frame, "NAME_1", ("NTL_2019", "NO2_2019"))

    def test_fails_with_duplicate_identity(self):
        frame = pd.DataFrame({"NAME_1": ["A", "A"]})
        with pytest.raises(ContractViolation, match="duplicate identities"):
            assert_master_table(frame, "NAME_1", ())

    def test_rows_preserved(self):
        assert_rows_preserved(3, 3, "NTL_2019")
        with pytest.raises(ContractViolation, match="3 -> 2"):
            assert_rows_preserved(3, 2, "NTL_2019")


class TestFailureTypes:

    def test_source_unavailable_carries_context(self):
        err = SourceUnavailableError("VIIRS", "no such store")
        assert err.source_id == "VIIRS"
        assert err.reason == "no such store"
        assert str(err) == "Source 'VIIRS' unavailable: no such store"

    def test_metric_computation_error_carries_metric_and_year(self):
        err = MetricComputationError("NTL", 2019, "boom")
        assert (err.metric, err.year) == ("NTL", 2019)
        assert str(err) == "Failed computing NTL for 2019: boom"
        assert str(MetricComputationError("NO2", 2020)) == "Failed computing NO2 for 2020"


def test_every_stage_has_documented_invariants():
    assert set(PIPELINE_INVARIANTS) == set(STAGE_REQUIREMENTS)
    for stage, invariants in PIPELINE_INVARIANTS.items():
        assert invariants, stage
        assert STAGE_REQUIREMENTS[stage] in ("REQUIRED", "OPTIONAL")
