"""Core table types shared by the raster and pipeline stages."""

from regionstats.core.tables import MetricYearTable, MasterTable, metric_column

__all__ = ['MetricYearTable', 'MasterTable', 'metric_column']
