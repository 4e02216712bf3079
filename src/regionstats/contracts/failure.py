"""Centralized failure types for the regionstats pipeline.

Contracts fail fast, loud, and once. All contract violations raise the same
exception type, allowing the caller to handle pipeline bugs uniformly.
Collaborator outages have their own types so the run can report which
(metric, year) was being computed when it aborted.
"""

from typing import Optional


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates a bug in pipeline logic or malformed collaborator data,
    not bad user configuration or an empty reduction. It means a stage did
    not produce the invariants it promised.

    Key distinction:
    - ValueError: User/config error (handled by Pydantic)
    - ContractViolation: Broken stage invariant
    - SourceUnavailableError: Boundary or raster store cannot be reached
    - NaN values: Empty reductions (never an exception)
    """
    pass


class SourceUnavailableError(RuntimeError):
    """Raised when a boundary or raster collaborator cannot be read."""

    def __init__(self, source_id: str, reason: str):
        self.source_id = source_id
        self.reason = reason
        super().__init__(f"Source '{source_id}' unavailable: {reason}")


class MetricComputationError(RuntimeError):
    """Fatal failure while computing one (metric, year) table.

    The run aborts on the first one; ``__cause__`` holds the original error.
    """

    def __init__(self, metric: str, year: int, reason: Optional[str] = None):
        self.metric = metric
        self.year = year
        message = f"Failed computing {metric} for {year}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
