"""Region stage contract.

Enforces the guarantee that the boundary table carries a usable identity:
the identity is the sole join key for the whole run.
"""

import pandas as pd
from regionstats.contracts.base import require


def assert_region_table(frame: pd.DataFrame, identity_column: str) -> None:
    """Enforce region stage contract.

    Called immediately after the boundary source is read.

    Parameters
    ----------
    frame : pd.DataFrame
        Boundary table (usually a GeoDataFrame)

    identity_column : str
        Name of the identity column (from config)

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        identity_column in frame.columns,
        f"Region contract violated: missing identity column '{identity_column}'"
    )

    identities = frame[identity_column]
    require(
        not identities.isna().any(),
        f"Region contract violated: {int(identities.isna().sum())} null identities"
    )

    duplicated = identities[identities.duplicated()].unique().tolist()
    require(
        not duplicated,
        f"Region contract violated: duplicate identities {duplicated}"
    )
