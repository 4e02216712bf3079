"""regionstats User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the pipeline behavior. Expert defaults are in regionstats.schemas.param

Usage:
    python scripts/run_regionstats.py scripts/user_config.py
    python scripts/run_regionstats.py scripts/user_config.py --years 2019-2021
    python scripts/run_regionstats.py scripts/user_config.py --join-policy inner
"""

CONFIG = {
    # ========================================================================
    # RUN SCOPE
    # ========================================================================
    "YEARS": [2019, 2020, 2021, 2022, 2023, 2024],
    "BASE_DIR": "./output",          # exports/, logs/ and config snapshots

    # ========================================================================
    # REGIONS
    # ========================================================================
    "BOUNDARY_PATH": "./data/gadm41_province.gpkg",
    "BOUNDARY_LAYER": "ADM_ADM_1",   # None for single-layer files
    "IDENTITY_COLUMN": "NAME_1",     # Unique province name

    # ========================================================================
    # RASTER STORES (NetCDF/Zarr exports of the collections)
    # ========================================================================
    "NTL_PATH": "./data/viirs_dnb_monthly.nc",   # band: avg_rad
    "NO2_PATH": "./data/s5p_l3_no2.nc",          # band: tropospheric_NO2_column_number_density

    # ========================================================================
    # ACCUMULATION & EXPORT
    # ========================================================================
    "JOIN_POLICY": "left",           # "left" keeps every region, "inner" drops incomplete ones
    "UNCOVERED_REGIONS": "emit",     # "emit" NaN rows or "drop" regions outside the rasters
    "WORKERS": 1,                    # >1 computes (year, metric) tables in parallel
    "EXPORT_FORMAT": "csv",          # "csv" or "parquet"
    "EXPORT_DESCRIPTION": None,      # None -> NTL_and_NO2_per_province_<first>-<last>
    "REGION_LABEL": "province",      # noun in the default export name
}
