"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
"""

from regionstats.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a pipeline contract.

    This is called at stage boundaries to verify the preceding stage
    produced the guaranteed invariants. It is fail-fast: no recovery,
    no fallback, no silence.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.

    message : str
        Error message explaining the contract violation (for debugging).

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require("NAME_1" in gdf.columns, "Region contract: missing 'NAME_1'")
    >>> require(df[identity].is_unique, "Metric contract: duplicate identities")
    """
    if not condition:
        raise ContractViolation(message)
