"""Multi-year pipeline orchestration.

Iterates years and metrics, computes one MetricYearTable per pair, folds
them into the master table and hands the result to the exporter.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Optional, TYPE_CHECKING

from regionstats.contracts import (
    ContractViolation,
    MetricComputationError,
    SourceUnavailableError,
    require,
)
from regionstats.core import MasterTable, MetricYearTable, metric_column
from regionstats.export import TableExporter, default_description
from regionstats.pipeline.accumulator import TableAccumulator
from regionstats.pipeline.metric import YearlyMetricPipeline
from regionstats.raster import RasterReducer, SourceRegistry, ZonalAggregator
from regionstats.regions import RegionTable, load_region_table
from regionstats.setup_directories import get_log_path, setup_output_directories

if TYPE_CHECKING:
    from regionstats.schemas import InternalConfig, InternalMetricConfig

__all__ = ['PipelineOrchestrator']

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """Runs the yearly metric pipeline over all years and exports the result.

    This is the main entry point for running ``regionstats``.

    **Flow:**

    1. The region table is loaded once; its identity column becomes the
       initial master table.
    2. For each year (ascending) and each metric (declared order) the
       band is collapsed over the year and aggregated per region.
    3. Every MetricYearTable is merged into the master table under the
       configured join policy.
    4. ``start()`` exports the final table and returns its path.

    **Parallelism:**

    With ``processing.workers > 1`` all (year, metric) computations run on
    a thread pool. Results are still merged in (year, metric) order, so
    the column layout is the same as a sequential run.

    **Failures:**

    An unreachable raster store or a broken stage contract aborts the run
    with MetricComputationError naming the metric and year. Nothing is
    retried and nothing is exported. Empty reductions are not failures;
    they show up as missing values.

    **Logging:**

    All output goes to both console and log file
    (``logs/regionstats_<description>.log``). Level comes from
    ``config.logging.level``.

    Example usage::

        from regionstats.pipeline import PipelineOrchestrator
        from regionstats.schemas import resolve_config, ParamConfig

        config = resolve_config(ParamConfig(), {"BOUNDARY_PATH": "prov.shp",
                                                "NTL_PATH": "viirs.nc",
                                                "NO2_PATH": "no2.nc"})
        orch = PipelineOrchestrator(config, setup_output_directories(config.base_dir))
        csv_path = orch.start()
    """

    def __init__(
        self,
        config: "InternalConfig",
        output_dirs: Optional[dict] = None,
        sources: Optional[SourceRegistry] = None,
        region_table: Optional[RegionTable] = None,
    ):
        """Initialize orchestrator with runtime configuration.

        Parameters
        ----------
        config : InternalConfig
            Resolved runtime configuration.
        output_dirs : dict, optional
            Output directory paths from ``setup_output_directories()``.
            Created under ``config.base_dir`` by ``start()`` if omitted.
        sources : SourceRegistry, optional
            Raster stores. Built from ``config.sources`` if omitted.
        region_table : RegionTable, optional
            Regions to aggregate over. Loaded from ``config.boundary`` if
            omitted.
        """
        self.config = config
        self.output_dirs = output_dirs
        self.sources = sources if sources is not None else SourceRegistry.from_config(config)
        self._region_table = region_table
        self.accumulator = TableAccumulator(config.join.policy)
        self.description = config.export.description or default_description(
            config.years, [m.output_prefix for m in config.metrics], config.boundary.region_label,
        )
        self._handlers: list[logging.Handler] = []

    @property
    def region_table(self) -> RegionTable:
        """The run's regions; loaded from the boundary file on first access."""
        if self._region_table is None:
            boundary = self.config.boundary
            if boundary.path is None:
                raise SourceUnavailableError("boundary", "no boundary path configured")
            self._region_table = load_region_table(
                boundary.path, boundary.identity_column, layer=boundary.layer
            )
        return self._region_table

    def _setup_logging(self):
        """Configure the root logger with file and console handlers.

        Log level and paths derived from config.
        """
        log_level = getattr(logging, self.config.logging.level.upper(), logging.INFO)
        log_path = get_log_path(self.output_dirs, self.description)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Clear existing handlers and add new ones
        root = logging.getLogger()
        root.setLevel(log_level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)

        # File handler
        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

        # Console handler
        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

        self._handlers = [fh, ch]
        logger.info("Logging: level=%s, file=%s", logging.getLevelName(log_level), log_path)

    def _close_logging(self):
        root = logging.getLogger()
        for handler in self._handlers:
            root.removeHandler(handler)
            handler.close()
        self._handlers = []

    def run(
        self,
        years: Optional[Iterable[int]] = None,
        metrics: Optional[Iterable["InternalMetricConfig"]] = None,
    ) -> MasterTable:
        """Compute and merge every (year, metric) table.

        Parameters
        ----------
        years : iterable of int, optional
            Years to process; defaults to ``config.years``. Processed in
            ascending order.
        metrics : iterable of InternalMetricConfig, optional
            Metrics to compute per year; defaults to ``config.metrics``.

        Returns
        -------
        MasterTable
            Identity column followed by ``<PREFIX>_<year>`` columns in
            (year, metric) order.

        Raises
        ------
        MetricComputationError
            First (metric, year) whose computation failed.
        SourceUnavailableError
            If the boundary file cannot be read.
        """
        years = sorted(self.config.years if years is None else years)
        metrics = list(self.config.metrics if metrics is None else metrics)
        require(len(set(years)) == len(years), f"Duplicate years requested: {years}")

        regions = self.region_table
        master = MasterTable.from_regions(regions)
        logger.info("Regions: %d, years: %s, metrics: %s",
                    len(regions), years, [m.output_prefix for m in metrics])

        if not years or not metrics:
            logger.warning("Nothing to compute; master table has identity column only")
            return master

        pipeline = YearlyMetricPipeline(
            RasterReducer(self.sources),
            ZonalAggregator(self.config.zonal.uncovered_regions),
            regions,
        )

        workers = self.config.processing.workers
        if workers > 1:
            return self._run_parallel(pipeline, master, years, metrics, workers)

        for year in years:
            logger.info("Processing year: %d", year)
            for metric in metrics:
                table = self._compute(pipeline, metric, year)
                master = self.accumulator.merge(master, table)
        return master

    def _run_parallel(
        self,
        pipeline: YearlyMetricPipeline,
        master: MasterTable,
        years: list,
        metrics: list,
        workers: int,
    ) -> MasterTable:
        logger.info("Computing %d tables on %d workers", len(years) * len(metrics), workers)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="regionstats") as pool:
            futures = {
                (year, index): pool.submit(self._compute, pipeline, metric, year)
                for year in years
                for index, metric in enumerate(metrics)
            }
            try:
                for year in years:
                    logger.info("Processing year: %d", year)
                    for index in range(len(metrics)):
                        table = futures[(year, index)].result()
                        master = self.accumulator.merge(master, table)
            except MetricComputationError:
                for future in futures.values():
                    future.cancel()
                raise
        return master

    @staticmethod
    def _compute(
        pipeline: YearlyMetricPipeline,
        metric: "InternalMetricConfig",
        year: int,
    ) -> MetricYearTable:
        try:
            return pipeline.compute_metric_year(metric, year)
        except (SourceUnavailableError, ContractViolation) as e:
            logger.error("%s failed: %s", metric_column(metric.output_prefix, year), e)
            raise MetricComputationError(metric.output_prefix, year, str(e)) from e

    def _log_summary(self, master: MasterTable, elapsed: float):
        logger.info("=" * 60)
        logger.info("Master table: %d rows x %d columns (%.1f seconds)",
                    len(master), len(master.columns), elapsed)
        for column, missing in master.missing_counts().items():
            if missing:
                logger.info("  %s: %d missing", column, missing)
        logger.info("=" * 60)

    def start(self) -> Path:
        """Run the pipeline, export the result and return the written path.

        All output (console + file) logged to
        ``logs/regionstats_<description>.log`` at the level specified in
        ``config.logging.level``.

        Raises
        ------
        MetricComputationError
            A (metric, year) failed; nothing is exported.

        Examples
        --------
        ::

            orch = PipelineOrchestrator(config, output_dirs)
            path = orch.start()
        """
        if self.output_dirs is None:
            self.output_dirs = setup_output_directories(self.config.base_dir)

        self._setup_logging()
        try:
            logger.info("=" * 60)
            logger.info("Starting regionstats pipeline: %s", self.description)
            logger.info("=" * 60)

            start_time = time.time()
            master = self.run()
            self._log_summary(master, time.time() - start_time)

            exporter = TableExporter(self.output_dirs["exports"])
            return exporter.export(master, self.description, self.config.export.format)
        finally:
            self._close_logging()
