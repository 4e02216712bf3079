"""RasterReducer: date filtering and temporal collapse."""

import logging
from datetime import date

import numpy as np
import pandas as pd
import pytest

from regionstats.contracts import ContractViolation, SourceUnavailableError
from regionstats.raster import RasterReducer, SourceRegistry

from tests.helpers.fake_raster import UnreadableSource, make_raster_dataset, make_registry

pytestmark = pytest.mark.unit


def _reduce(ds, year, reducer="mean", band="avg_rad"):
    return RasterReducer(make_registry(ntl=ds)).reduce(
        "ntl", band, date(year, 1, 1), date(year, 12, 31), temporal_reducer=reducer
    )


class TestTemporalCollapse:

    def test_mean_of_year(self):
        annual = _reduce(make_raster_dataset(), 2019)

        assert annual.dims == ("y", "x")
        assert annual.shape == (4, 4)
        np.testing.assert_allclose(annual.values, 1.0)
        assert annual.attrs["n_images"] == 12
        assert annual.attrs["crs"] == "EPSG:3857"
        assert annual.attrs["source_id"] == "ntl"

    def test_only_images_in_range_used(self):
        annual = _reduce(make_raster_dataset(years=(2019, 2020)), 2020)
        np.testing.assert_allclose(annual.values, 2.0)

    def test_mean_varies_by_month(self):
        times = [pd.Timestamp(2019, 1, 1), pd.Timestamp(2019, 6, 1)]
        ds = make_raster_dataset(times=times)
        ds["avg_rad"][1] = 3.0

        annual = _reduce(ds, 2019)
        np.testing.assert_allclose(annual.values, 2.0)

    @pytest.mark.parametrize("reducer, expected", [
        ("sum", 12.0), ("min", 1.0), ("max", 1.0), ("median", 1.0),
    ])
    def test_other_reducers(self, reducer, expected):
        annual = _reduce(make_raster_dataset(years=(2019,)), 2019, reducer=reducer)
        np.testing.assert_allclose(annual.values, expected)

    def test_nan_pixels_skipped(self):
        times = [pd.Timestamp(2019, 1, 1), pd.Timestamp(2019, 2, 1)]
        ds = make_raster_dataset(times=times)
        ds["avg_rad"][0, 0, 0] = np.nan

        annual = _reduce(ds, 2019)
        assert annual.values[0, 0] == 1.0

    def test_all_nan_pixel_stays_nan(self):
        ds = make_raster_dataset(years=(2019,), nan_columns=(3,))

        annual = _reduce(ds, 2019, reducer="sum")

        assert np.isnan(annual.values[:, 3]).all()
        np.testing.assert_allclose(annual.values[:, :3], 12.0)


class TestDateRange:

    def test_last_day_of_year_included(self):
        ds = make_raster_dataset(times=[pd.Timestamp("2019-12-31T23:30:00")])

        assert _reduce(ds, 2019).attrs["n_images"] == 1
        assert _reduce(ds, 2020).attrs["n_images"] == 0

    def test_first_day_of_year_included(self):
        ds = make_raster_dataset(times=[pd.Timestamp("2020-01-01T00:00:00")])

        assert _reduce(ds, 2020).attrs["n_images"] == 1
        assert _reduce(ds, 2019).attrs["n_images"] == 0

    def test_unsorted_times_accepted(self):
        times = [pd.Timestamp(2019, 9, 1), pd.Timestamp(2019, 2, 1)]
        annual = _reduce(make_raster_dataset(times=times), 2019)
        assert annual.attrs["n_images"] == 2

    def test_empty_range_gives_nan_raster(self, caplog):
        with caplog.at_level(logging.WARNING, logger="regionstats.raster.reducer"):
            annual = _reduce(make_raster_dataset(years=(2019,)), 2021)

        assert annual.dims == ("y", "x")
        assert annual.shape == (4, 4)
        assert np.isnan(annual.values).all()
        assert annual.attrs["n_images"] == 0
        assert "No ntl/avg_rad images" in caplog.text


class TestReducerErrors:

    def test_unknown_temporal_reducer(self):
        with pytest.raises(ValueError, match="Unknown temporal reducer"):
            _reduce(make_raster_dataset(), 2019, reducer="mode")

    def test_unknown_band(self):
        with pytest.raises(ContractViolation):
            _reduce(make_raster_dataset(), 2019, band="radiance")

    def test_unregistered_source(self):
        reducer = RasterReducer(make_registry())
        with pytest.raises(SourceUnavailableError):
            reducer.reduce("ntl", "avg_rad", date(2019, 1, 1), date(2019, 12, 31))

    def test_unreadable_pixels_raise_source_error(self):
        reducer = RasterReducer(SourceRegistry({"ntl": UnreadableSource("ntl")}))

        with pytest.raises(SourceUnavailableError, match="NetCDF: HDF error") as excinfo:
            reducer.reduce("ntl", "avg_rad", date(2019, 1, 1), date(2019, 12, 31))
        assert excinfo.value.source_id == "ntl"
        assert isinstance(excinfo.value.__cause__, RuntimeError)
