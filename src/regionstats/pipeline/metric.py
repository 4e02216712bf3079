"""Per-(metric, year) computation: temporal collapse then zonal aggregation."""

import logging
from datetime import date
from typing import TYPE_CHECKING

from regionstats.core import MetricYearTable, metric_column

if TYPE_CHECKING:
    from regionstats.raster import RasterReducer, ZonalAggregator
    from regionstats.regions import RegionTable
    from regionstats.schemas import InternalMetricConfig

__all__ = ['YearlyMetricPipeline', 'metric_column']

logger = logging.getLogger(__name__)


class YearlyMetricPipeline:
    """Compute one metric for one calendar year.

    Holds no state between calls, so one instance can be shared by worker
    threads.

    Parameters
    ----------
    reducer : RasterReducer
        Collapses the band's images for the year.
    aggregator : ZonalAggregator
        Reduces the collapsed raster per region.
    region_table : RegionTable
        Regions to aggregate over.
    """

    def __init__(
        self,
        reducer: "RasterReducer",
        aggregator: "ZonalAggregator",
        region_table: "RegionTable",
    ):
        self.reducer = reducer
        self.aggregator = aggregator
        self.region_table = region_table

    def compute_metric_year(self, metric: "InternalMetricConfig", year: int) -> MetricYearTable:
        """Return the ``<PREFIX>_<year>`` table for ``metric``.

        The year covers January 1 through December 31 inclusive.
        """
        column = metric_column(metric.output_prefix, year)
        logger.debug("Computing %s from %s/%s", column, metric.source_id, metric.band)

        annual = self.reducer.reduce(
            metric.source_id,
            metric.band,
            date(year, 1, 1),
            date(year, 12, 31),
            temporal_reducer=metric.temporal_reducer,
        )
        return self.aggregator.aggregate(
            annual,
            self.region_table,
            metric.spatial_reducer,
            metric.scale,
            column,
        )
