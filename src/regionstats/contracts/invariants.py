"""Formal pipeline invariants.

This file documents what each stage MUST produce. This is architecture, not code.
Use this file as a reviewer anchor and system reference.
"""

PIPELINE_INVARIANTS = {
    "regions": [
        "Identity column exists and is string-valued",
        "Identities are non-null and unique",
        "Geometry is never mutated after loading",
    ],

    "raster": [
        "Temporal collapse returns a 2D (y, x) raster",
        "Empty date ranges produce an all-NaN raster, not an error",
    ],

    "metric_year": [
        "Exactly two columns: identity and '<PREFIX>_<year>'",
        "Identities are unique and a subset of the region table",
        "Value column is float typed; missing aggregates are NaN",
    ],

    "master": [
        "First column is the identity; identities are unique",
        "Each merge adds at most one column, never duplicates a row",
        "Under the left policy the row count equals the region count",
        "Final column count is 1 + |years| x |metrics| when every merge succeeded",
    ],
}

# Which stages are optional vs required
STAGE_REQUIREMENTS = {
    "regions": "REQUIRED",
    "raster": "REQUIRED",
    "metric_year": "REQUIRED",
    "master": "REQUIRED",
}
