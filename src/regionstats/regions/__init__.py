"""Region identities and their geometries."""

from regionstats.regions.boundary import RegionTable, load_region_table

__all__ = ['RegionTable', 'load_region_table']
