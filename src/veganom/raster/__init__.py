"""Raster data model, boundary clipping and data providers.

- model: RasterImage, RasterSeries, LazyRasterSeries, date filtering/sorting
- boundary: shapely clipping region
- provider: provider protocol, xarray/NetCDF provider, load()
"""

from veganom.raster.model import (
    SpatialDomain,
    RasterImage,
    RasterSeries,
    LazyRasterSeries,
    filter_by_date,
    sort_by_time,
)
from veganom.raster.boundary import Boundary
from veganom.raster.provider import RasterProvider, DatasetRasterProvider, load

__all__ = [
    "SpatialDomain",
    "RasterImage",
    "RasterSeries",
    "LazyRasterSeries",
    "filter_by_date",
    "sort_by_time",
    "Boundary",
    "RasterProvider",
    "DatasetRasterProvider",
    "load",
]
