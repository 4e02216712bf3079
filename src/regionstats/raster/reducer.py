"""Collapse a filtered raster time series to one representative raster.

For each (metric, year) the pipeline needs a single image: the band is
filtered to the calendar range and reduced per pixel over time (the annual
mean of monthly composites in the default configuration).

Notes
-----
An empty range is not an error. The result is then an all-NaN raster on
the source grid, and every region downstream gets a missing value.
"""

import logging
import warnings
from datetime import date
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd
import xarray as xr

from regionstats.contracts import SourceUnavailableError, assert_collapsed

if TYPE_CHECKING:
    from regionstats.raster.source import SourceRegistry

__all__ = ['RasterReducer', 'TEMPORAL_REDUCERS']

logger = logging.getLogger(__name__)

TEMPORAL_REDUCERS = ("mean", "median", "min", "max", "sum")


class RasterReducer:
    """Filter a raster time series by date and collapse it over time.

    Parameters
    ----------
    registry : SourceRegistry
        Resolves source ids to raster stores.

    Examples
    --------
    >>> reducer = RasterReducer(registry)
    >>> annual = reducer.reduce("NOAA/VIIRS/DNB/MONTHLY_V1/VCMCFG", "avg_rad",
    ...                         date(2019, 1, 1), date(2019, 12, 31))
    >>> annual.dims
    ('y', 'x')
    """

    def __init__(self, registry: "SourceRegistry"):
        self.registry = registry

    def reduce(
        self,
        source_id: str,
        band_name: str,
        year_start: date,
        year_end: date,
        temporal_reducer: str = "mean",
    ) -> xr.DataArray:
        """Return the per-pixel temporal reduction of one band.

        Parameters
        ----------
        source_id : str
            Raster store identifier.
        band_name : str
            Band (data variable) to select.
        year_start, year_end : date
            Inclusive date range; images stamped anywhere on ``year_end`` count.
        temporal_reducer : str
            One of ``mean``, ``median``, ``min``, ``max``, ``sum``. NaN pixels
            are skipped.

        Returns
        -------
        xr.DataArray
            2D ``(y, x)`` raster with ``crs``, ``source_id``, ``band`` and
            ``n_images`` in attrs.

        Raises
        ------
        ValueError
            If the reducer name is unknown.
        SourceUnavailableError
            If the store cannot be opened or its pixel data cannot be read.
        """
        if temporal_reducer not in TEMPORAL_REDUCERS:
            raise ValueError(
                f"Unknown temporal reducer '{temporal_reducer}', expected one of {TEMPORAL_REDUCERS}"
            )

        source = self.registry.get(source_id)
        band = source.open_band(band_name)
        time_dim, y_dim, x_dim = source.time_dim, source.y_dim, source.x_dim

        # Stores open lazily; pixel data is first read in here
        try:
            stack = self._filter_dates(band, time_dim, year_start, year_end)
            n_images = int(stack.sizes[time_dim])

            if n_images == 0:
                logger.warning("No %s/%s images between %s and %s; raster is empty",
                               source_id, band_name, year_start, year_end)
                collapsed = self._empty_like(band, y_dim, x_dim)
            else:
                logger.debug("Collapsing %d %s/%s images with %s",
                             n_images, source_id, band_name, temporal_reducer)
                collapsed = self._collapse(stack, time_dim, temporal_reducer).load()
        except (OSError, RuntimeError) as e:
            raise SourceUnavailableError(source_id, f"failed reading band '{band_name}': {e}") from e

        collapsed = collapsed.astype("float64").transpose(y_dim, x_dim)
        collapsed.name = band_name
        collapsed.attrs = {
            "crs": source.crs,
            "source_id": source_id,
            "band": band_name,
            "n_images": n_images,
            "temporal_reducer": temporal_reducer,
        }

        assert_collapsed(collapsed, y_dim, x_dim)
        return collapsed

    @staticmethod
    def _filter_dates(band: xr.DataArray, time_dim: str, year_start: date, year_end: date) -> xr.DataArray:
        # End bound is exclusive at midnight of the following day so the whole
        # last day is included regardless of the timestamps' time of day.
        start = pd.Timestamp(year_start)
        stop = pd.Timestamp(year_end) + pd.Timedelta(days=1)
        times = pd.DatetimeIndex(band[time_dim].values)
        keep = np.flatnonzero((times >= start) & (times < stop))
        return band.isel({time_dim: keep}).sortby(time_dim)

    @staticmethod
    def _collapse(stack: xr.DataArray, time_dim: str, temporal_reducer: str) -> xr.DataArray:
        # All-NaN pixels legitimately yield NaN; numpy's warning about it is noise.
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", category=RuntimeWarning)
            if temporal_reducer == "sum":
                return stack.sum(dim=time_dim, skipna=True, min_count=1)
            return getattr(stack, temporal_reducer)(dim=time_dim, skipna=True)

    @staticmethod
    def _empty_like(band: xr.DataArray, y_dim: str, x_dim: str) -> xr.DataArray:
        shape = (band.sizes[y_dim], band.sizes[x_dim])
        return xr.DataArray(
            np.full(shape, np.nan),
            dims=(y_dim, x_dim),
            coords={y_dim: band[y_dim].values, x_dim: band[x_dim].values},
        )
