"""Table stage contracts.

Enforces the shape guarantees of per-year metric tables and of the
accumulating master table.
"""

from typing import Sequence

import pandas as pd
from regionstats.contracts.base import require


def assert_metric_year_table(
    frame: pd.DataFrame,
    identity_column: str,
    value_column: str,
) -> None:
    """Enforce the metric-year table contract.

    Called when a MetricYearTable is constructed.

    Raises
    ------
    ContractViolation
        If the table is not exactly (identity, value) or identities repeat
    """
    require(
        list(frame.columns) == [identity_column, value_column],
        f"Metric contract violated: columns {list(frame.columns)}, "
        f"expected ['{identity_column}', '{value_column}']"
    )
    require(
        frame[identity_column].is_unique,
        f"Metric contract violated: duplicate identities in '{value_column}'"
    )
    require(
        pd.api.types.is_float_dtype(frame[value_column]),
        f"Metric contract violated: '{value_column}' has dtype "
        f"{frame[value_column].dtype}, expected float"
    )


def assert_master_table(
    frame: pd.DataFrame,
    identity_column: str,
    value_columns: Sequence[str],
) -> None:
    """Enforce the master table contract.

    Raises
    ------
    ContractViolation
        If column layout does not match the declared schema or identities repeat
    """
    expected = [identity_column, *value_columns]
    require(
        list(frame.columns) == expected,
        f"Master contract violated: columns {list(frame.columns)}, expected {expected}"
    )
    require(
        len(set(value_columns)) == len(value_columns),
        f"Master contract violated: duplicate value columns {list(value_columns)}"
    )
    require(
        frame[identity_column].is_unique,
        "Master contract violated: duplicate identities"
    )


def assert_rows_preserved(before: int, after: int, value_column: str) -> None:
    """Enforce that a left-join merge neither dropped nor duplicated rows."""
    require(
        before == after,
        f"Master contract violated: merging '{value_column}' changed row count "
        f"{before} -> {after}"
    )
