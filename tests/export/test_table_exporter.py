"""TableExporter and the default export name."""

import numpy as np
import pandas as pd
import pytest

from regionstats.contracts import ContractViolation
from regionstats.core import MasterTable
from regionstats.export import TableExporter, default_description

pytestmark = pytest.mark.unit


@pytest.fixture
def master():
    frame = pd.DataFrame({
        "NAME_1": ["A", "B"],
        "NTL_2019": [8.0, np.nan],
        "NO2_2019": [0.5, 1.25],
    })
    return MasterTable("NAME_1", ("NTL_2019", "NO2_2019"), frame)


class TestDefaultDescription:

    def test_first_and_last_year(self):
        assert default_description([2019, 2020, 2024]) == "NTL_and_NO2_per_province_2019-2024"

    def test_unsorted_years(self):
        assert default_description([2024, 2019]) == "NTL_and_NO2_per_province_2019-2024"

    def test_custom_prefixes(self):
        assert default_description([2020], ["NTL"]) == "NTL_per_province_2020-2020"

    def test_no_years(self):
        assert default_description([]) == "NTL_and_NO2_per_province"

    def test_region_label(self):
        assert default_description([2019, 2020], region_label="district") == "NTL_and_NO2_per_district_2019-2020"


class TestTableExporter:

    def test_csv_layout(self, master, tmp_path):
        path = TableExporter(tmp_path / "exports").export(master, "prov_2019")

        assert path == tmp_path / "exports" / "prov_2019.csv"
        lines = path.read_text().splitlines()
        assert lines[0] == "NAME_1,NTL_2019,NO2_2019"
        # missing value written as an empty cell, no index column
        assert lines[2] == "B,,1.25"

    def test_csv_bytes_are_deterministic(self, master, tmp_path):
        exporter = TableExporter(tmp_path)
        first = exporter.export(master, "run").read_bytes()
        second = exporter.export(master, "run").read_bytes()
        assert first == second

    def test_parquet_round_trip(self, master, tmp_path):
        path = TableExporter(tmp_path).export(master, "run", file_format="PARQUET")

        assert path.suffix == ".parquet"
        pd.testing.assert_frame_equal(pd.read_parquet(path), master.frame)

    def test_unknown_format(self, master, tmp_path):
        with pytest.raises(ValueError, match="Unknown export format"):
            TableExporter(tmp_path).export(master, "run", file_format="xlsx")

    @pytest.mark.parametrize("description", ["", "../escape", "a\\b"])
    def test_description_must_be_file_stem(self, master, tmp_path, description):
        with pytest.raises(ContractViolation):
            TableExporter(tmp_path).export(master, description)
