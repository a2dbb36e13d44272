"""Raster data providers and series ingestion.

A provider hands out a LazyRasterSeries of time-stamped images for a band,
already carrying its own no-data masking (NaN). The xarray implementation
serves a (time, lat, lon) variable of a Dataset, typically opened from a
NetCDF stack of vegetation-index composites; CF mask-and-scale decoding
turns fill values into NaN.

load() is the ingestion stage: it clips every provided image to the
boundary and returns a time-ascending RasterSeries.
"""

import logging
from pathlib import Path
from typing import Optional, Protocol, Union, TYPE_CHECKING

import xarray as xr

from veganom.contracts.base import require
from veganom.contracts.failure import DataUnavailable
from veganom.raster.boundary import Boundary
from veganom.raster.model import LazyRasterSeries, RasterImage, RasterSeries, sort_by_time

if TYPE_CHECKING:
    from veganom.schemas.internal import InternalCoordNamesConfig

__all__ = ['RasterProvider', 'DatasetRasterProvider', 'load']

logger = logging.getLogger(__name__)


class RasterProvider(Protocol):
    """Anything that can produce a lazy image sequence for a band."""

    def images(self, band: str) -> LazyRasterSeries:
        ...


class DatasetRasterProvider:
    """Serve one image per time step from an xarray.Dataset.

    Parameters
    ----------
    ds : xr.Dataset
        Dataset with one (time, y, x) variable per band.
    coord_names : InternalCoordNamesConfig or dict, optional
        Names of the time, y (latitude) and x (longitude) coordinates in
        ``ds``. Defaults to ``time``, ``lat``, ``lon``.
    source : str, optional
        Label used in log messages.

    Examples
    --------
    >>> provider = DatasetRasterProvider.from_netcdf("modis_evi.nc")
    >>> lazy = provider.images("EVI")
    >>> first = next(iter(lazy))
    """

    def __init__(self, ds: xr.Dataset,
                 coord_names: Optional[Union[dict, "InternalCoordNamesConfig"]] = None,
                 source: str = "dataset"):
        if coord_names is None:
            coord_names = {"time": "time", "y": "lat", "x": "lon"}
        elif not isinstance(coord_names, dict):
            coord_names = coord_names.model_dump()
        self.ds = ds
        self.time_name = coord_names["time"]
        self.y_name = coord_names["y"]
        self.x_name = coord_names["x"]
        self.source = source

    @classmethod
    def from_netcdf(cls, path: Union[str, Path],
                    coord_names: Optional[Union[dict, "InternalCoordNamesConfig"]] = None
                    ) -> "DatasetRasterProvider":
        """Open a NetCDF file (mask-and-scale decoded) as a provider."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Raster file not found: {path}")
        ds = xr.open_dataset(path, mask_and_scale=True)
        logger.info("Opened raster stack: %s (vars=%s)", path.name, list(ds.data_vars))
        return cls(ds, coord_names, source=path.name)

    @property
    def bands(self) -> list:
        return [name for name in self.ds.data_vars if self.time_name in self.ds[name].dims]

    def images(self, band: str) -> LazyRasterSeries:
        """Lazy sequence of ``band`` images in the dataset's stored order.

        Raises
        ------
        DataUnavailable
            If ``band`` is not a time-varying variable of the dataset.
        """
        if band not in self.bands:
            raise DataUnavailable(f"Band {band!r} not available from {self.source} (have {self.bands})")

        var = self.ds[band]
        require(
            var.ndim == 3,
            f"Provider contract violated: {band!r} has {var.ndim} dims, expected 3 (time, y, x)"
        )
        renames = {old: new for old, new in ((self.y_name, "y"), (self.x_name, "x")) if old != new}
        if renames:
            var = var.rename(renames)
        var = var.transpose(self.time_name, "y", "x")
        times = var[self.time_name].values

        def _generate():
            for i, ts in enumerate(times):
                plane = var.isel({self.time_name: i}).drop_vars(self.time_name, errors="ignore")
                yield RasterImage(plane.load(), ts, band)

        return LazyRasterSeries(_generate(), description=f"{band} from {self.source}")


def load(provider: RasterProvider, boundary: Boundary, band: str) -> RasterSeries:
    """Clip every provided ``band`` image to ``boundary``.

    Returns
    -------
    RasterSeries
        Clipped images sorted by timestamp ascending.

    Raises
    ------
    DataUnavailable
        If the provider yields no images.
    """
    clipped = [boundary.clip(image) for image in provider.images(band) if image.band == band]
    if not clipped:
        raise DataUnavailable(f"Provider returned no {band!r} images")

    series = RasterSeries(tuple(clipped))
    if not series.is_sorted():
        logger.debug("Provider order is not chronological; sorting %d images", len(series))
        series = sort_by_time(series)

    ts = series.timestamps
    logger.info("Loaded %d %s images: %s .. %s", len(series), band, ts[0].date(), ts[-1].date())
    return series
