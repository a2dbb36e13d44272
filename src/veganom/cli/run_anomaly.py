"""Core anomaly pipeline execution logic.

This module contains the actual pipeline runner, separated from argument parsing.
Scripts are thin wrappers; this is the real implementation.
"""

import json
import logging
import importlib.util
import shutil
from pathlib import Path
from typing import Optional, Dict, Any

from veganom.pipeline.context import AnomalyContext
from veganom.pipeline.orchestrator import PipelineOrchestrator
from veganom.raster.boundary import Boundary
from veganom.raster.provider import DatasetRasterProvider
from veganom.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig
from veganom.setup_directories import setup_output_directories


logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def run_anomaly_pipeline(
    user_config_path: str,
    cli_args: Optional[Dict[str, Any]] = None,
    point: Optional[tuple] = None,
    rerun: bool = False,
    verbose: bool = False
) -> AnomalyContext:
    """Execute the cumulative anomaly pipeline.

    1. Loads and resolves configuration (Param < User < CLI)
    2. Sets up output directories
    3. Opens the NetCDF stack and the GeoJSON boundary
    4. Runs the orchestrator (writes NetCDF products)
    5. Optionally samples one point and exports it to Parquet

    Parameters
    ----------
    user_config_path : str
        Path to user config file (Python file with CONFIG dict).
    cli_args : dict, optional
        CLI argument overrides. Keys: input_path, boundary_path, base_dir,
        log_level. All optional.
    point : (lon, lat), optional
        Point to sample after the run.
    rerun : bool, optional
        If True, delete the output directory before running.
    verbose : bool, optional
        If True, enable DEBUG logging and print full resolved config.

    Returns
    -------
    AnomalyContext
        Result of the run.

    Raises
    ------
    FileNotFoundError
        If the config, input or boundary file does not exist.
    ValueError
        If configuration validation fails or input/boundary paths are unset.
    DataSparsityError
        If a required window holds no data.

    Examples
    --------
    ::

        run_anomaly_pipeline("scripts/user_config.py")

        run_anomaly_pipeline(
            "scripts/user_config.py",
            cli_args={"base_dir": "/scratch/veganom"},
            point=(85.3, 27.7),
        )
    """
    param_cfg = ParamConfig()

    user_cfg = UserConfig.model_validate(load_user_config_dict(user_config_path))

    cli_args = dict(cli_args or {})
    if verbose and "log_level" not in cli_args:
        cli_args["log_level"] = "DEBUG"
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    config = resolve_config(param_cfg, user_cfg, cli_cfg)

    if config.input_path is None or config.boundary_path is None:
        raise ValueError("Both INPUT_PATH and BOUNDARY_PATH must be set (config or CLI)")

    if rerun and config.base_dir is not None:
        base_dir_path = Path(config.base_dir)
        if base_dir_path.exists():
            print(f"Cleaning output directory: {base_dir_path}")
            shutil.rmtree(base_dir_path)

    output_dirs = setup_output_directories(config.base_dir)

    print(f"\n{'='*60}")
    print("veganom Cumulative Anomaly Pipeline")
    print('='*60)
    print(f"Config:    {user_config_path}")
    print(f"Band:      {config.global_.band}")
    print(f"Input:     {config.input_path}")
    print(f"Boundary:  {config.boundary_path}")
    print(f"Output:    {output_dirs['base']}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(by_alias=True), indent=2))
        print('='*60)

    provider = DatasetRasterProvider.from_netcdf(config.input_path, config.global_.coord_names)
    boundary = Boundary.from_geojson(config.boundary_path)

    orchestrator = PipelineOrchestrator(config, output_dirs)
    context = orchestrator.run(provider, boundary)

    if point is not None:
        orchestrator.save_samples(context, point)

    return context
