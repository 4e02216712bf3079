"""Command-line interface modules for regionstats pipeline execution.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from regionstats.cli.run_pipeline import run_regionstats_pipeline, main

__all__ = ['run_regionstats_pipeline', 'main']
