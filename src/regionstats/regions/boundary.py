"""Region identity table loaded from an administrative boundary source.

The boundary file (shapefile, GeoPackage, GeoJSON, ...) is read once at
startup through GeoPandas. Only the identity column and the geometry are
kept; every other attribute of the boundary source is dropped because the
identity is the sole join key for the rest of the run.

Row order is the boundary source's insertion order and is what the final
table follows under the left join policy.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import geopandas as gpd
import pandas as pd

from regionstats.contracts import SourceUnavailableError, assert_region_table

__all__ = ['RegionTable', 'load_region_table']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegionTable:
    """Immutable table of named region geometries.

    Attributes
    ----------
    identity_column : str
        Name of the identity column (e.g. ``NAME_1`` for GADM provinces).
    frame : gpd.GeoDataFrame
        Two columns: identity and geometry. Treat as read-only.
    """

    identity_column: str
    frame: gpd.GeoDataFrame

    @classmethod
    def from_geodataframe(cls, gdf: gpd.GeoDataFrame, identity_column: str) -> "RegionTable":
        """Build a RegionTable from any GeoDataFrame holding an identity column.

        Raises
        ------
        ContractViolation
            If the identity column is missing, has nulls or duplicates.
        """
        assert_region_table(gdf, identity_column)

        frame = gdf[[identity_column, gdf.geometry.name]].copy()
        frame[identity_column] = frame[identity_column].astype(str)
        frame = frame.rename_geometry("geometry") if gdf.geometry.name != "geometry" else frame
        frame = frame.reset_index(drop=True)
        return cls(identity_column=identity_column, frame=frame)

    @property
    def crs(self):
        return self.frame.crs

    @property
    def identities(self) -> list[str]:
        return self.frame[self.identity_column].tolist()

    def __len__(self) -> int:
        return len(self.frame)

    def identity_frame(self) -> pd.DataFrame:
        """Project to the identity column only (plain DataFrame, no geometry)."""
        return pd.DataFrame({self.identity_column: self.frame[self.identity_column].to_numpy()})

    def to_crs(self, crs) -> "RegionTable":
        """Return a reprojected copy; this table is left untouched."""
        if crs is None or self.crs is None or self.crs == crs:
            return self
        return RegionTable(self.identity_column, self.frame.to_crs(crs))


def load_region_table(
    path: str,
    identity_column: str,
    layer: Optional[str] = None,
) -> RegionTable:
    """Read a boundary file into a RegionTable.

    Parameters
    ----------
    path : str
        Any vector format GeoPandas can read.
    identity_column : str
        Column holding the unique region name.
    layer : str, optional
        Layer name for multi-layer containers such as GeoPackage.

    Raises
    ------
    SourceUnavailableError
        If the file does not exist or cannot be read.
    ContractViolation
        If the identity column is unusable.
    """
    boundary_path = Path(path).expanduser()
    if not boundary_path.exists():
        raise SourceUnavailableError(str(boundary_path), "boundary file not found")

    read_kwargs = {"layer": layer} if layer else {}
    try:
        gdf = gpd.read_file(boundary_path, **read_kwargs)
    except Exception as e:
        raise SourceUnavailableError(str(boundary_path), str(e)) from e

    table = RegionTable.from_geodataframe(gdf, identity_column)
    logger.info("Loaded %d regions from %s (identity=%s, crs=%s)",
                len(table), boundary_path.name, identity_column, table.crs)
    return table
