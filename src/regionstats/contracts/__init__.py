"""Pipeline contracts: fail-fast enforcement of stage invariants.

This package enforces semantic guarantees between pipeline stages.
Contracts fail immediately and loudly when pipeline stages don't produce
their promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- Reducers turn empty data into NaN, not errors
"""

from regionstats.contracts.failure import (
    ContractViolation,
    SourceUnavailableError,
    MetricComputationError,
)
from regionstats.contracts.base import require
from regionstats.contracts.regions import assert_region_table
from regionstats.contracts.raster import assert_collapsed
from regionstats.contracts.tables import (
    assert_metric_year_table,
    assert_master_table,
    assert_rows_preserved,
)

__all__ = [
    "ContractViolation",
    "SourceUnavailableError",
    "MetricComputationError",
    "require",
    "assert_region_table",
    "assert_collapsed",
    "assert_metric_year_table",
    "assert_master_table",
    "assert_rows_preserved",
]
