"""`regionstats` - per-region annual aggregates from raster time series.

Subpackages:
- schemas: Layered configuration (Param < User < CLI -> Internal)
- contracts: Stage invariants and failure types
- regions: Boundary loading and the region identity table
- raster: Raster stores, temporal reduction, zonal aggregation
- core: Metric-year and master table types
- pipeline: Per-year metric tables, accumulation, orchestration
- export: Tabular export sink
- cli: Pipeline runner and console entry point
"""

__version__ = "0.1.0"
