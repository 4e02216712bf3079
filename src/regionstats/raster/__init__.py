"""Raster stores, temporal reduction and zonal aggregation."""

from regionstats.raster.source import RasterSource, XarraySource, SourceRegistry
from regionstats.raster.reducer import RasterReducer, TEMPORAL_REDUCERS
from regionstats.raster.zonal import ZonalAggregator, SPATIAL_REDUCERS, sampling_spacing

__all__ = [
    'RasterSource',
    'XarraySource',
    'SourceRegistry',
    'RasterReducer',
    'TEMPORAL_REDUCERS',
    'ZonalAggregator',
    'SPATIAL_REDUCERS',
    'sampling_spacing',
]
