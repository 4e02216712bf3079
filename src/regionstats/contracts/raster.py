"""Raster stage contract.

Enforces the guarantee that after temporal collapse, the raster is a
single 2D band on the source grid.
"""

import xarray as xr
from regionstats.contracts.base import require


def assert_collapsed(raster: xr.DataArray, y_dim: str, x_dim: str) -> None:
    """Enforce raster stage contract.

    Parameters
    ----------
    raster : xr.DataArray
        Output of RasterReducer.reduce()

    y_dim, x_dim : str
        Spatial dimension names (from config)

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        isinstance(raster, xr.DataArray),
        f"Raster contract violated: output is {type(raster)}, expected DataArray"
    )
    require(
        raster.dims == (y_dim, x_dim),
        f"Raster contract violated: dims {raster.dims}, expected ({y_dim!r}, {x_dim!r})"
    )
