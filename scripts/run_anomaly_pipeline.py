#!/usr/bin/env python3
"""``veganom`` Cumulative Anomaly Pipeline Runner.

Usage:
    python scripts/run_anomaly_pipeline.py scripts/user_config.py
    python scripts/run_anomaly_pipeline.py scripts/user_config.py --input modis_evi.nc
    python scripts/run_anomaly_pipeline.py scripts/user_config.py --lon 85.3 --lat 27.7

Note: User config in scripts/user_config.py, expert defaults in
veganom.schemas.param.ParamConfig
"""

import argparse

from veganom.cli import run_anomaly_pipeline


def main():
    parser = argparse.ArgumentParser(description="Run the veganom cumulative anomaly pipeline")
    parser.add_argument("config", help="Path to user config file")
    parser.add_argument("--input", dest="input_path", help="NetCDF raster stack")
    parser.add_argument("--boundary", dest="boundary_path", help="GeoJSON boundary")
    parser.add_argument("--base-dir", help="Output directory")
    parser.add_argument("--lon", type=float, help="Longitude of a point to sample")
    parser.add_argument("--lat", type=float, help="Latitude of a point to sample")
    parser.add_argument("--rerun", action="store_true", help="Delete output directory before running")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    if (args.lon is None) != (args.lat is None):
        parser.error("--lon and --lat must be given together")
    point = (args.lon, args.lat) if args.lon is not None else None

    run_anomaly_pipeline(
        args.config,
        cli_args={
            "input_path": args.input_path,
            "boundary_path": args.boundary_path,
            "base_dir": args.base_dir,
        },
        point=point,
        rerun=args.rerun,
        verbose=args.verbose,
    )


if __name__ == "__main__":
    main()
