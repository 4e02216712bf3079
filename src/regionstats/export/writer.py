"""Tabular export of the final master table.

The table is written once per run under the ``exports`` output directory
as ``<description>.csv`` (no index, missing values as empty cells) or
``<description>.parquet``. Writing the same table twice produces the same
bytes.
"""

import logging
from pathlib import Path
from typing import Sequence, Union

from regionstats.contracts import require
from regionstats.core import MasterTable

__all__ = ['TableExporter', 'EXPORT_FORMATS', 'default_description']

logger = logging.getLogger(__name__)

EXPORT_FORMATS = {"csv": ".csv", "parquet": ".parquet"}


def default_description(
    years: Sequence[int],
    prefixes: Sequence[str] = ("NTL", "NO2"),
    region_label: str = "province",
) -> str:
    """Export name used when the config does not set one.

    Examples
    --------
    >>> default_description([2019, 2020, 2021])
    'NTL_and_NO2_per_province_2019-2021'
    >>> default_description([2020], ["NTL"], "district")
    'NTL_per_district_2020-2020'
    >>> default_description([])
    'NTL_and_NO2_per_province'
    """
    stem = f"{'_and_'.join(prefixes)}_per_{region_label}"
    if not years:
        return stem
    return f"{stem}_{min(years)}-{max(years)}"


class TableExporter:
    """Write MasterTables into an export directory.

    Parameters
    ----------
    exports_dir : str or Path
        Target directory; created if missing.
    """

    def __init__(self, exports_dir: Union[str, Path]):
        self.exports_dir = Path(exports_dir)

    def export(self, master: MasterTable, description: str, file_format: str = "csv") -> Path:
        """Write ``master`` and return the written path.

        Parameters
        ----------
        master : MasterTable
            Final accumulated table.
        description : str
            File stem, e.g. ``NTL_and_NO2_per_province_2019-2024``.
        file_format : {'csv', 'parquet'}
            Output format.

        Raises
        ------
        ValueError
            If the format is not supported.
        ContractViolation
            If the description is empty or contains a path separator.
        """
        file_format = file_format.lower()
        if file_format not in EXPORT_FORMATS:
            raise ValueError(f"Unknown export format '{file_format}', expected one of {sorted(EXPORT_FORMATS)}")
        require(bool(description), "Export description must not be empty")
        require("/" not in description and "\\" not in description,
                f"Export description must be a file stem, got '{description}'")

        self.exports_dir.mkdir(parents=True, exist_ok=True)
        path = self.exports_dir / f"{description}{EXPORT_FORMATS[file_format]}"

        frame = master.to_dataframe()
        if file_format == "csv":
            frame.to_csv(path, index=False)
        else:
            frame.to_parquet(path, index=False)

        logger.info("Exported %d rows x %d columns to %s", len(frame), len(frame.columns), path)
        return path
