"""Pipeline modules.

- metric: one (metric, year) table
- accumulator: merges tables into the master table
- orchestrator: main pipeline controller
"""

from regionstats.pipeline.metric import YearlyMetricPipeline, metric_column
from regionstats.pipeline.accumulator import TableAccumulator
from regionstats.pipeline.orchestrator import PipelineOrchestrator

__all__ = [
    "YearlyMetricPipeline",
    "metric_column",
    "TableAccumulator",
    "PipelineOrchestrator",
]
