"""Typed per-region tables exchanged between pipeline stages.

Two shapes travel through the pipeline:

- ``MetricYearTable``: identity + one ``<PREFIX>_<year>`` value column,
  produced once per (metric, year) and consumed once by the accumulator.
- ``MasterTable``: identity + every value column accumulated so far, in
  accumulation order.

Both are frozen; every stage returns a new table instead of mutating its
input. Construction runs the table contracts, so a table that exists is a
table that satisfies its schema.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pandas as pd

from regionstats.contracts import assert_metric_year_table, assert_master_table

if TYPE_CHECKING:
    from regionstats.regions import RegionTable

__all__ = ['MetricYearTable', 'MasterTable', 'metric_column']


def metric_column(prefix: str, year: int) -> str:
    """Column name of one metric in one year, e.g. ``NTL_2019``."""
    return f"{prefix}_{year}"


@dataclass(frozen=True)
class MetricYearTable:
    """One metric for one year, one row per region."""

    identity_column: str
    value_column: str
    frame: pd.DataFrame = field(repr=False)

    def __post_init__(self):
        assert_metric_year_table(self.frame, self.identity_column, self.value_column)

    def __len__(self) -> int:
        return len(self.frame)

    def values(self) -> dict:
        """Identity -> value mapping (NaN kept)."""
        return dict(zip(self.frame[self.identity_column], self.frame[self.value_column]))


@dataclass(frozen=True)
class MasterTable:
    """The accumulating wide table.

    ``value_columns`` is the schema: it lists every column added so far,
    in the order the merges happened.
    """

    identity_column: str
    value_columns: tuple
    frame: pd.DataFrame = field(repr=False)

    def __post_init__(self):
        assert_master_table(self.frame, self.identity_column, self.value_columns)

    @classmethod
    def from_regions(cls, regions: "RegionTable") -> "MasterTable":
        """Identity-only projection of a region table."""
        return cls(regions.identity_column, (), regions.identity_frame())

    @property
    def columns(self) -> list[str]:
        return [self.identity_column, *self.value_columns]

    @property
    def identities(self) -> list[str]:
        return self.frame[self.identity_column].tolist()

    def __len__(self) -> int:
        return len(self.frame)

    def to_dataframe(self) -> pd.DataFrame:
        """Copy of the table for consumers outside the pipeline."""
        return self.frame.copy()

    def missing_counts(self) -> dict[str, int]:
        """Number of missing cells per value column."""
        return {col: int(self.frame[col].isna().sum()) for col in self.value_columns}
