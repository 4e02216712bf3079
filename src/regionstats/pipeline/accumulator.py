"""Merge per-year metric tables into the wide master table.

Each merge is a join on the region identity that adds one column. The
master table is never modified; ``merge`` returns a new one.

Join policies:

- ``left`` keeps every master row; regions missing from the incoming table
  get NaN in the new column.
- ``inner`` keeps only identities present on both sides and logs the ones
  it drops.

A column that already exists in the master is kept as is; the incoming
duplicate is discarded with a warning.
"""

import logging
from typing import Iterable

import pandas as pd

from regionstats.contracts import assert_rows_preserved, require
from regionstats.core import MasterTable, MetricYearTable

__all__ = ['TableAccumulator', 'JOIN_POLICIES']

logger = logging.getLogger(__name__)

JOIN_POLICIES = ("left", "inner")


class TableAccumulator:
    """Fold MetricYearTables into a MasterTable.

    Parameters
    ----------
    policy : {'left', 'inner'}
        Join policy applied by every merge.

    Examples
    --------
    >>> acc = TableAccumulator("left")
    >>> master = acc.fold(MasterTable.from_regions(regions), [ntl_2019, no2_2019])
    >>> master.columns
    ['NAME_1', 'NTL_2019', 'NO2_2019']
    """

    def __init__(self, policy: str = "left"):
        if policy not in JOIN_POLICIES:
            raise ValueError(f"Unknown join policy '{policy}', expected one of {JOIN_POLICIES}")
        self.policy = policy

    def merge(self, master: MasterTable, table: MetricYearTable) -> MasterTable:
        """Return ``master`` with ``table``'s value column joined on identity.

        Raises
        ------
        ContractViolation
            If the identity columns differ or the join would duplicate rows.
        """
        identity = master.identity_column
        require(
            table.identity_column == identity,
            f"Cannot merge '{table.value_column}': identity column "
            f"'{table.identity_column}' != master '{identity}'"
        )

        column = table.value_column
        if column == identity or column in master.value_columns:
            logger.warning("Column '%s' already in master table; keeping existing values", column)
            return master

        merged = pd.merge(
            master.frame,
            table.frame,
            on=identity,
            how=self.policy,
            sort=False,
            validate="one_to_one",
        )

        if self.policy == "left":
            assert_rows_preserved(len(master), len(merged), column)
        elif len(merged) < len(master):
            kept = set(merged[identity])
            dropped = [name for name in master.identities if name not in kept]
            logger.warning("Inner join on '%s' dropped %d regions: %s", column, len(dropped), dropped)

        merged = merged.reset_index(drop=True)
        return MasterTable(identity, (*master.value_columns, column), merged)

    def fold(self, master: MasterTable, tables: Iterable[MetricYearTable]) -> MasterTable:
        """Merge ``tables`` one after another, in iteration order."""
        for table in tables:
            master = self.merge(master, table)
        return master
