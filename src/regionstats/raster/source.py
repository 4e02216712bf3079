"""Time-indexed raster stores queried by band.

A raster store is any collection of dated images sharing one grid, e.g. the
VIIRS monthly composites or the Sentinel-5P L3 NO2 product exported to
NetCDF/Zarr. Stores are opened lazily with xarray and addressed by a source
id, so pipeline code never deals with file paths.

Notes
-----
- Bands are returned with dims ``(time, y, x)`` whatever the on-disk order.
- Stores are opened once and cached; xarray reads stay lazy until reduction.
"""

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union, TYPE_CHECKING

import xarray as xr

from regionstats.contracts import SourceUnavailableError, require

if TYPE_CHECKING:
    from regionstats.schemas import InternalConfig

__all__ = ['RasterSource', 'XarraySource', 'SourceRegistry']

logger = logging.getLogger(__name__)


class RasterSource(ABC):
    """A queryable time-indexed raster store."""

    def __init__(self, source_id: str, time_dim: str = "time", y_dim: str = "y", x_dim: str = "x"):
        self.source_id = source_id
        self.time_dim = time_dim
        self.y_dim = y_dim
        self.x_dim = x_dim

    @property
    @abstractmethod
    def crs(self) -> Optional[str]:
        """CRS of the raster grid, or None when unknown."""

    @abstractmethod
    def open_band(self, band_name: str) -> xr.DataArray:
        """Return the band as a lazy ``(time, y, x)`` DataArray."""


class XarraySource(RasterSource):
    """Raster store backed by an xarray Dataset (NetCDF, Zarr or in-memory).

    Parameters
    ----------
    source_id : str
        Identifier used by metric configs (e.g. ``NOAA/VIIRS/DNB/MONTHLY_V1/VCMCFG``).
    data : str, Path or xr.Dataset
        Path to open with ``xarray.open_dataset`` or an already opened Dataset.
    crs : str, optional
        Overrides whatever CRS the dataset declares.
    engine : str, optional
        xarray backend engine (``netcdf4``, ``zarr``, ...).

    Examples
    --------
    >>> src = XarraySource("VIIRS", "/data/viirs_monthly.nc", crs="EPSG:3857")
    >>> band = src.open_band("avg_rad")
    >>> band.dims
    ('time', 'y', 'x')
    """

    def __init__(
        self,
        source_id: str,
        data: Union[str, Path, xr.Dataset],
        crs: Optional[str] = None,
        engine: Optional[str] = None,
        time_dim: str = "time",
        y_dim: str = "y",
        x_dim: str = "x",
    ):
        super().__init__(source_id, time_dim=time_dim, y_dim=y_dim, x_dim=x_dim)
        self._data = data
        self._crs_override = crs
        self._engine = engine
        self._dataset: Optional[xr.Dataset] = data if isinstance(data, xr.Dataset) else None
        self._lock = threading.Lock()

    def _open(self) -> xr.Dataset:
        with self._lock:
            if self._dataset is not None:
                return self._dataset

            path = Path(self._data).expanduser()
            if not path.exists():
                raise SourceUnavailableError(self.source_id, f"no such store: {path}")

            try:
                self._dataset = xr.open_dataset(path, engine=self._engine)
            except (OSError, ValueError) as e:
                raise SourceUnavailableError(self.source_id, str(e)) from e

            logger.info("Opened raster store %s: %s", self.source_id, path)
            return self._dataset

    @property
    def crs(self) -> Optional[str]:
        if self._crs_override:
            return self._crs_override

        ds = self._open()
        if "crs" in ds.attrs:
            return str(ds.attrs["crs"])
        if "spatial_ref" in ds.variables and "crs_wkt" in ds["spatial_ref"].attrs:
            return ds["spatial_ref"].attrs["crs_wkt"]
        return None

    def open_band(self, band_name: str) -> xr.DataArray:
        ds = self._open()
        require(
            band_name in ds.data_vars,
            f"Source '{self.source_id}' has no band '{band_name}' "
            f"(available: {sorted(ds.data_vars)})"
        )

        band = ds[band_name]
        for dim in (self.time_dim, self.y_dim, self.x_dim):
            require(
                dim in band.dims,
                f"Source '{self.source_id}' band '{band_name}' lacks dimension '{dim}'"
            )
        return band.transpose(self.time_dim, self.y_dim, self.x_dim)


class SourceRegistry:
    """Maps source ids to raster stores.

    Sources declared in config without a path stay unresolved; asking for
    one raises SourceUnavailableError, which aborts the run with context.
    """

    def __init__(self, sources: Optional[dict[str, RasterSource]] = None):
        self._sources: dict[str, RasterSource] = dict(sources or {})

    @classmethod
    def from_config(cls, config: "InternalConfig") -> "SourceRegistry":
        coords = config.coord_names
        sources = {}
        for source_id, source_cfg in config.sources.items():
            if source_cfg.path is None:
                logger.debug("Source %s declared without a path", source_id)
                continue
            sources[source_id] = XarraySource(
                source_id,
                source_cfg.path,
                crs=source_cfg.crs,
                engine=source_cfg.engine,
                time_dim=coords.time,
                y_dim=coords.y,
                x_dim=coords.x,
            )
        return cls(sources)

    def register(self, source: RasterSource) -> None:
        self._sources[source.source_id] = source

    def get(self, source_id: str) -> RasterSource:
        if source_id not in self._sources:
            raise SourceUnavailableError(source_id, "not registered (missing path in config?)")
        return self._sources[source_id]

    def __contains__(self, source_id: str) -> bool:
        return source_id in self._sources
