"""veganom User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the pipeline behavior. Advanced settings are in veganom.schemas.param.

Usage:
    python scripts/run_anomaly_pipeline.py scripts/user_config.py
    python scripts/run_anomaly_pipeline.py scripts/user_config.py --lon 85.3 --lat 27.7
"""

CONFIG = {
    # ========================================================================
    # INPUTS & OUTPUT
    # ========================================================================
    "INPUT_PATH": "data/modis_myd13a1_evi.nc",   # (time, lat, lon) stack, 16-day composites
    "BOUNDARY_PATH": "data/hkh_boundary.geojson",
    "BASE_DIR": "output",                        # All outputs go here

    # ========================================================================
    # DATA
    # ========================================================================
    "BAND": "EVI",            # Variable name in INPUT_PATH

    # ========================================================================
    # PERIODS (closed intervals)
    # ========================================================================
    "REFERENCE_START": "2001-01-01",
    "REFERENCE_END": "2005-12-31",
    "TARGET_START": "2006-01-01",
    "TARGET_END": "2020-12-31",

    # ========================================================================
    # PROCESSING
    # ========================================================================
    "NODATA_POLICY": "skip",  # "skip" or "propagate"
    "SAMPLE_RADIUS_M": 500,   # Point-sample neighbourhood in metres

    "LOG_LEVEL": "INFO",

    # Nested overrides for advanced users, e.g.:
    # "global": {"coord_names": {"time": "time", "y": "latitude", "x": "longitude"}},
    # "output": {"compression": "gzip"},
}
