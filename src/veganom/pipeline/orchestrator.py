"""Pipeline orchestration.

Configures logging, runs the anomaly processor and persists its products:
NetCDF rasters for the cumulative and total anomaly, Parquet files for
sampled point series.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, TYPE_CHECKING

import xarray as xr

from veganom.anomaly.sampler import Coordinate, validate_coordinate
from veganom.pipeline.context import AnomalyContext
from veganom.pipeline.processor import AnomalyProcessor
from veganom.raster.boundary import Boundary
from veganom.raster.provider import RasterProvider

if TYPE_CHECKING:
    from veganom.schemas import InternalConfig

__all__ = ['PipelineOrchestrator']

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """Runs the anomaly pipeline and writes its outputs.

    **Output Files:**

    - **Cumulative NetCDF**: analysis/cumulative_anomaly_{band}.nc
      (time, y, x) running sum of anomalies
    - **Total NetCDF**: analysis/total_anomaly_{band}.nc (y, x) net change
    - **Point Parquet**: analysis/samples_{band}_{lon}_{lat}.parquet
      written by :meth:`save_samples`

    **Logging:**

    All output goes to both console and log file (logs/pipeline_{band}.log).
    Log level controlled via config: "DEBUG", "INFO", "WARNING", "ERROR".

    Example usage::

        output_dirs = setup_output_directories(config.base_dir)
        orch = PipelineOrchestrator(config, output_dirs)
        context = orch.run(provider, boundary)
        orch.save_samples(context, (85.3, 27.7))
    """

    def __init__(self, config: "InternalConfig", output_dirs: Dict[str, Path]):
        """Initialize orchestrator.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration.
        output_dirs : dict
            Output directory paths (from setup_output_directories):
            - base: root output directory
            - analysis: NetCDF and Parquet products
            - logs: Log files
        """
        self.config = config
        self.output_dirs = {key: Path(path) for key, path in output_dirs.items()}
        self.band = config.global_.band
        self.processor = AnomalyProcessor(config)

    def _setup_logging(self):
        """Configure root logger with file and console handlers."""
        log_level = getattr(logging, self.config.logging.level, logging.INFO)

        log_dir = self.output_dirs.get("logs", Path("."))
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / f"pipeline_{self.band}.log"

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Clear existing handlers and add new ones
        root = logging.getLogger()
        root.setLevel(log_level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()

        # File handler
        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

        # Console handler
        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

        logger.info("Logging: level=%s, file=%s", self.config.logging.level, log_path)

    def run(self, provider: RasterProvider, boundary: Boundary) -> AnomalyContext:
        """Run the processor and write the NetCDF products.

        Errors from the processor propagate unchanged.
        """
        self._setup_logging()

        logger.info("=" * 60)
        logger.info("Starting %s Anomaly Pipeline", self.band)
        logger.info("=" * 60)
        logger.info("Reference: %s .. %s", self.config.reference.start, self.config.reference.end)
        logger.info("Target:    %s .. %s", self.config.target.start, self.config.target.end)
        logger.info("Boundary:  %s", boundary)

        context = self.processor.run(provider, boundary)

        if len(context.cumulative) > 0:
            self._save_netcdf(
                context.cumulative.to_dataarray(name="cumulative_anomaly"),
                f"cumulative_anomaly_{self.band}.nc",
                "Cumulative vegetation index anomaly",
            )
        if context.total is not None:
            self._save_netcdf(
                context.total.data.rename("total_anomaly"),
                f"total_anomaly_{self.band}.nc",
                "Total vegetation index anomaly over the target period",
            )

        logger.info("Pipeline finished: %r", context)
        return context

    def _save_netcdf(self, da: xr.DataArray, filename: str, description: str) -> Path:
        path = self.output_dirs["analysis"] / filename
        path.parent.mkdir(parents=True, exist_ok=True)

        ds = da.to_dataset()
        ds.attrs.update({
            "band": self.band,
            "reference_period": f"{self.config.reference.start}/{self.config.reference.end}",
            "target_period": f"{self.config.target.start}/{self.config.target.end}",
            "nodata_policy": self.config.baseline.nodata_policy,
            "description": description,
        })
        encoding = {
            da.name: {"zlib": self.config.output.netcdf_complevel > 0,
                      "complevel": self.config.output.netcdf_complevel}
        }
        ds.to_netcdf(path, mode='w', engine='netcdf4', format='NETCDF4', encoding=encoding)

        logger.info("Saved: %s [%s]", path.name, ", ".join(ds.data_vars))
        return path

    def save_samples(self, context: AnomalyContext, coordinate: Coordinate,
                     filepath: Optional[str] = None) -> Optional[Path]:
        """Export the point series at ``coordinate`` to Parquet.

        Parameters
        ----------
        context : AnomalyContext
            Result of :meth:`run`.
        coordinate : (lon, lat) or mapping
            Point to sample.
        filepath : str, optional
            Output Parquet filepath. If None, uses
            `{output_dirs['analysis']}/samples_{band}_{lon}_{lat}.parquet`

        Returns
        -------
        Path or None
            Written file, or None when the point has no valid data.
        """
        lon, lat = validate_coordinate(coordinate)
        if filepath is None:
            filepath = self.output_dirs["analysis"] / f"samples_{self.band}_{lon:.4f}_{lat:.4f}.parquet"
        filepath = Path(filepath)

        df = context.sample_to_frame((lon, lat))
        if df.empty:
            logger.warning("No valid data at (%.4f, %.4f); nothing exported", lon, lat)
            return None

        compression = self.config.output.compression
        filepath.parent.mkdir(parents=True, exist_ok=True)
        df.to_parquet(filepath, engine='pyarrow',
                      compression=None if compression == "none" else compression,
                      index=False)
        logger.info("Exported %d samples to: %s", len(df), filepath)
        return filepath
