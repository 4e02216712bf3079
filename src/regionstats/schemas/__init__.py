"""Pydantic configuration schemas for the regionstats pipeline.

This module provides strictly typed configuration models. All configuration
validation, coercion, and normalization happens at schema validation time
via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from regionstats.schemas.resolve import resolve_config
from regionstats.schemas.internal import InternalConfig, InternalMetricConfig
from regionstats.schemas.param import ParamConfig, MetricConfig
from regionstats.schemas.user import UserConfig
from regionstats.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'InternalMetricConfig',
    'ParamConfig',
    'MetricConfig',
    'UserConfig',
    'CLIConfig',
]
