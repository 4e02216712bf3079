"""Export sink for the final region table."""

from regionstats.export.writer import TableExporter, EXPORT_FORMATS, default_description

__all__ = ['TableExporter', 'EXPORT_FORMATS', 'default_description']
