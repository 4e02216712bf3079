"""Zonal aggregation of a 2D raster over region geometries.

The raster is turned into a fishnet of pixel polygons which is intersected
with the region geometries. Each pixel contributes to a region in
proportion to the share of its area that falls inside the region, so
pixels straddling a border are split between neighbours rather than
counted twice.

- ``sum``: sum of ``value * fraction`` over the region's pixels.
- ``mean``: the same weighted sum divided by the sum of the fractions.

A region with no valid (non-NaN) pixel gets a missing value, never zero.

The sampling ``scale`` is a ground resolution in metres. For a geographic
raster it becomes a spacing in degrees at the regions' mid latitude.
"""

import logging
from typing import TYPE_CHECKING

import geopandas as gpd
import numpy as np
import pandas as pd
import pyproj
import shapely
import xarray as xr

from regionstats.contracts import assert_collapsed, require
from regionstats.core import MetricYearTable

if TYPE_CHECKING:
    from regionstats.regions import RegionTable

__all__ = ['ZonalAggregator', 'SPATIAL_REDUCERS', 'sampling_spacing']

logger = logging.getLogger(__name__)

SPATIAL_REDUCERS = ("sum", "mean")

METRES_PER_DEGREE = 111_320.0


def sampling_spacing(crs, scale: float, latitude: float = 0.0) -> tuple[float, float]:
    """Convert a ground resolution in metres to ``(x, y)`` spacing in CRS units.

    Parameters
    ----------
    crs : str, pyproj.CRS or None
        Raster CRS. Without one, ``scale`` is returned as is.
    scale : float
        Ground resolution in metres.
    latitude : float
        Latitude (degrees) at which a geographic spacing is evaluated.

    Examples
    --------
    >>> sampling_spacing("EPSG:3857", 500.0)
    (500.0, 500.0)
    >>> sampling_spacing("EPSG:4326", 111320.0)
    (1.0, 1.0)
    """
    if crs is None:
        return scale, scale
    crs = pyproj.CRS.from_user_input(crs)
    if crs.is_geographic:
        lat = float(np.clip(latitude, -89.0, 89.0))
        return float(scale / (METRES_PER_DEGREE * np.cos(np.radians(lat)))), scale / METRES_PER_DEGREE
    factor = float(crs.axis_info[0].unit_conversion_factor) if crs.axis_info else 1.0
    return scale / factor, scale / factor


def _spacing(coord: np.ndarray, fallback: float) -> float:
    if coord.size < 2:
        return fallback
    return float(np.median(np.abs(np.diff(coord))))


def _edges(coord: np.ndarray, spacing: float) -> tuple[float, float]:
    return float(coord.min()) - spacing / 2, float(coord.max()) + spacing / 2


class ZonalAggregator:
    """Reduce a collapsed raster to one value per region.

    Parameters
    ----------
    uncovered_regions : {'emit', 'drop'}
        What to do with regions that do not intersect the raster footprint
        at all: keep them with a missing value, or leave them out of the
        result table.

    Examples
    --------
    >>> agg = ZonalAggregator()
    >>> table = agg.aggregate(annual, regions, "sum", 500.0, "NTL_2019")
    >>> table.frame.columns.tolist()
    ['NAME_1', 'NTL_2019']
    """

    def __init__(self, uncovered_regions: str = "emit"):
        if uncovered_regions not in ("emit", "drop"):
            raise ValueError(f"uncovered_regions must be 'emit' or 'drop', got '{uncovered_regions}'")
        self.uncovered_regions = uncovered_regions

    def aggregate(
        self,
        raster: xr.DataArray,
        region_table: "RegionTable",
        reducer: str,
        scale: float,
        output_column: str,
    ) -> MetricYearTable:
        """Aggregate ``raster`` over every region.

        Parameters
        ----------
        raster : xr.DataArray
            2D raster, dims ``(y, x)``; ``attrs['crs']`` is honoured when set.
        region_table : RegionTable
            Regions to aggregate over. Reprojected to the raster CRS if needed.
        reducer : str
            ``sum`` or ``mean``.
        scale : float
            Ground sampling resolution in metres, converted to raster CRS
            units with :func:`sampling_spacing`. A raster whose native spacing
            differs is resampled (nearest neighbour) to that grid. A raster
            without a CRS takes ``scale`` in its own units.
        output_column : str
            Name of the value column in the returned table.

        Returns
        -------
        MetricYearTable
            Identity plus ``output_column``, in region table order.
        """
        if reducer not in SPATIAL_REDUCERS:
            raise ValueError(f"Unknown spatial reducer '{reducer}', expected one of {SPATIAL_REDUCERS}")
        require(scale > 0, f"Zonal scale must be positive, got {scale}")
        require(raster.ndim == 2, f"Zonal input must be 2D, got dims {raster.dims}")

        y_dim, x_dim = raster.dims
        assert_collapsed(raster, y_dim, x_dim)

        crs = raster.attrs.get("crs")
        regions = region_table.to_crs(crs)
        identity = regions.identity_column

        step_x, step_y = sampling_spacing(crs, scale, self._mid_latitude(raster, regions, y_dim))
        require(np.isfinite(step_x) and np.isfinite(step_y) and step_x > 0 and step_y > 0,
                f"Scale {scale} gives no usable sampling spacing in {crs}")

        footprint = self._footprint(raster, y_dim, x_dim, step_x, step_y)
        sampled = self._resample(raster, y_dim, x_dim, step_x, step_y)
        values = self._weighted_values(sampled, regions, y_dim, x_dim, reducer, step_x, step_y)

        frame = regions.identity_frame()
        frame[output_column] = frame[identity].map(values).astype("float64")

        if self.uncovered_regions == "drop":
            covered = regions.frame.geometry.intersects(footprint).to_numpy()
            if not covered.all():
                logger.info("Dropping %d regions outside the raster footprint: %s",
                            int((~covered).sum()), frame.loc[~covered, identity].tolist())
            frame = frame.loc[covered].reset_index(drop=True)

        logger.debug("%s: %d regions, %d with values",
                     output_column, len(frame), int(frame[output_column].notna().sum()))
        return MetricYearTable(identity, output_column, frame)

    @staticmethod
    def _mid_latitude(raster: xr.DataArray, regions: "RegionTable", y_dim: str) -> float:
        if len(regions):
            _, miny, _, maxy = regions.frame.total_bounds
            if np.isfinite(miny) and np.isfinite(maxy):
                return float((miny + maxy) / 2)
        ys = raster[y_dim].to_numpy()
        return float((ys.min() + ys.max()) / 2)

    @staticmethod
    def _footprint(raster: xr.DataArray, y_dim: str, x_dim: str, step_x: float, step_y: float):
        xs = raster[x_dim].to_numpy()
        ys = raster[y_dim].to_numpy()
        x0, x1 = _edges(xs, _spacing(xs, step_x))
        y0, y1 = _edges(ys, _spacing(ys, step_y))
        return shapely.box(x0, y0, x1, y1)

    @staticmethod
    def _resample(
        raster: xr.DataArray,
        y_dim: str,
        x_dim: str,
        step_x: float,
        step_y: float,
    ) -> xr.DataArray:
        xs = raster[x_dim].to_numpy()
        ys = raster[y_dim].to_numpy()
        dx = _spacing(xs, step_x)
        dy = _spacing(ys, step_y)
        if np.isclose(dx, step_x, rtol=1e-6) and np.isclose(dy, step_y, rtol=1e-6):
            return raster

        x0, x1 = _edges(xs, dx)
        y0, y1 = _edges(ys, dy)
        new_x = np.arange(x0 + step_x / 2, x1, step_x)
        new_y = np.arange(y0 + step_y / 2, y1, step_y)
        # Extent narrower than one sample: one sample at the centre
        if new_x.size == 0 or new_y.size == 0:
            logger.warning("Sampling spacing (%.6g, %.6g) exceeds the raster extent (%.6g, %.6g); "
                           "using one centre sample", step_x, step_y, x1 - x0, y1 - y0)
        if new_x.size == 0:
            new_x = np.array([(x0 + x1) / 2])
        if new_y.size == 0:
            new_y = np.array([(y0 + y1) / 2])
        logger.debug("Resampling %dx%d raster (spacing %.6g, %.6g) to %dx%d at (%.6g, %.6g)",
                     ys.size, xs.size, dx, dy, new_y.size, new_x.size, step_x, step_y)

        resampled = raster.sel({y_dim: new_y, x_dim: new_x}, method="nearest")
        return resampled.assign_coords({y_dim: new_y, x_dim: new_x})

    @staticmethod
    def _weighted_values(
        raster: xr.DataArray,
        regions: "RegionTable",
        y_dim: str,
        x_dim: str,
        reducer: str,
        step_x: float,
        step_y: float,
    ) -> pd.Series:
        identity = regions.identity_column
        empty = pd.Series(dtype="float64")
        if len(regions) == 0:
            return empty

        xs = raster[x_dim].to_numpy()
        ys = raster[y_dim].to_numpy()
        dx = _spacing(xs, step_x)
        dy = _spacing(ys, step_y)

        grid_x, grid_y = np.meshgrid(xs, ys)
        data = raster.transpose(y_dim, x_dim).to_numpy()

        minx, miny, maxx, maxy = regions.frame.total_bounds
        keep = (
            np.isfinite(data)
            & (grid_x + dx / 2 >= minx) & (grid_x - dx / 2 <= maxx)
            & (grid_y + dy / 2 >= miny) & (grid_y - dy / 2 <= maxy)
        )
        if not keep.any():
            return empty

        px, py, pv = grid_x[keep], grid_y[keep], data[keep]
        fishnet = gpd.GeoDataFrame(
            {"pixel_value": pv},
            geometry=shapely.box(px - dx / 2, py - dy / 2, px + dx / 2, py + dy / 2),
            crs=regions.crs,
        )

        pieces = gpd.overlay(fishnet, regions.frame, how="intersection", keep_geom_type=True)
        if pieces.empty:
            return empty

        weight = shapely.area(pieces.geometry.to_numpy()) / (dx * dy)
        parts = pd.DataFrame({
            identity: pieces[identity].to_numpy(),
            "weighted": pieces["pixel_value"].to_numpy() * weight,
            "weight": weight,
        })
        totals = parts.groupby(identity, sort=False)[["weighted", "weight"]].sum()

        if reducer == "sum":
            return totals["weighted"]
        return totals["weighted"] / totals["weight"]
