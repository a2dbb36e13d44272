"""Immutable raster data model: images, series and the lazy provider sequence.

A RasterImage is a single-band 2D field on a (y, x) grid tagged with a
timestamp and a band name. No-data pixels are NaN. Image arrays are stored
as read-only float64 so a derived series can be shared between stages (and
threads) without copying or locking.

A RasterSeries is an ordered tuple of images sharing one band and one grid.
It is ordered by timestamp ascending unless a caller sorted it otherwise.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Iterator, Optional, Tuple, Union

import numpy as np
import pandas as pd
import xarray as xr

from veganom.contracts.base import require
from veganom.contracts.failure import ContractViolation, DomainMismatch, EmptyRange

__all__ = [
    'SpatialDomain',
    'RasterImage',
    'RasterSeries',
    'LazyRasterSeries',
    'to_timestamp',
    'filter_by_date',
    'sort_by_time',
]

logger = logging.getLogger(__name__)

TimeLike = Union[str, datetime, np.datetime64, pd.Timestamp]


def to_timestamp(value: TimeLike) -> pd.Timestamp:
    """Normalize a time value to a tz-naive (UTC) pandas Timestamp."""
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


@dataclass(frozen=True, eq=False)
class SpatialDomain:
    """Pixel-centre coordinate vectors of a grid.

    ``y`` holds latitudes (rows), ``x`` longitudes (columns), both in degrees.
    """
    y: np.ndarray
    x: np.ndarray

    @property
    def shape(self) -> Tuple[int, int]:
        return (len(self.y), len(self.x))

    def matches(self, other: "SpatialDomain") -> bool:
        """True when both grids have identical shape and coordinates."""
        return (
            self.shape == other.shape
            and np.array_equal(self.y, other.y)
            and np.array_equal(self.x, other.x)
        )

    def extent(self) -> Tuple[float, float, float, float]:
        """Outer pixel-edge extent as (xmin, ymin, xmax, ymax).

        An axis with a single coordinate borrows the spacing of the other
        axis, so a one-row or one-column grid still has an area. A single
        pixel has no spacing to borrow and its extent is its centre.
        """
        half_x = _half_spacing(self.x)
        half_y = _half_spacing(self.y)
        if half_x is None:
            half_x = half_y
        if half_y is None:
            half_y = half_x
        half_x = half_x or 0.0
        half_y = half_y or 0.0
        return (
            float(np.min(self.x)) - half_x,
            float(np.min(self.y)) - half_y,
            float(np.max(self.x)) + half_x,
            float(np.max(self.y)) + half_y,
        )

    def __repr__(self) -> str:
        return f"SpatialDomain(shape={self.shape})"


def _half_spacing(coord: np.ndarray) -> Optional[float]:
    if len(coord) < 2:
        return None
    return float(np.median(np.abs(np.diff(coord)))) / 2.0


@dataclass(frozen=True, eq=False)
class RasterImage:
    """One time-stamped, single-band raster.

    Parameters
    ----------
    data : xr.DataArray
        2D field with dims ("y", "x"). Missing coordinates default to pixel
        indices. Values are copied into a read-only float64 array.
    timestamp : str, datetime64 or Timestamp
        Acquisition time.
    band : str
        Logical channel name, e.g. "EVI".
    """
    data: xr.DataArray
    timestamp: pd.Timestamp
    band: str

    def __post_init__(self):
        data = self.data
        require(
            isinstance(data, xr.DataArray),
            f"Raster contract violated: data is {type(data)}, expected xarray.DataArray"
        )
        require(
            data.dims == ("y", "x"),
            f"Raster contract violated: dims are {data.dims}, expected ('y', 'x')"
        )
        values = np.array(data.values, dtype=np.float64, copy=True)
        values.flags.writeable = False
        y = data["y"].values if "y" in data.coords else np.arange(values.shape[0])
        x = data["x"].values if "x" in data.coords else np.arange(values.shape[1])
        frozen = xr.DataArray(
            values,
            dims=("y", "x"),
            coords={"y": np.asarray(y), "x": np.asarray(x)},
            name=self.band,
            attrs=dict(data.attrs),
        )
        object.__setattr__(self, "data", frozen)
        object.__setattr__(self, "timestamp", to_timestamp(self.timestamp))

    @classmethod
    def from_array(cls, values, y, x, timestamp: TimeLike, band: str,
                   attrs: Optional[dict] = None) -> "RasterImage":
        """Build an image from a plain 2D array and coordinate vectors."""
        da = xr.DataArray(
            np.asarray(values, dtype=np.float64),
            dims=("y", "x"),
            coords={"y": np.asarray(y), "x": np.asarray(x)},
            attrs=attrs or {},
        )
        return cls(da, timestamp, band)

    @classmethod
    def zeros(cls, domain: SpatialDomain, timestamp: TimeLike, band: str) -> "RasterImage":
        """Constant-zero image on ``domain`` (valid everywhere)."""
        return cls.from_array(np.zeros(domain.shape), domain.y, domain.x, timestamp, band)

    @property
    def values(self) -> np.ndarray:
        return self.data.values

    @property
    def domain(self) -> SpatialDomain:
        return SpatialDomain(y=self.data["y"].values, x=self.data["x"].values)

    def with_values(self, values, timestamp: Optional[TimeLike] = None) -> "RasterImage":
        """New image on the same grid and band, optionally re-stamped."""
        return RasterImage.from_array(
            values,
            self.data["y"].values,
            self.data["x"].values,
            self.timestamp if timestamp is None else timestamp,
            self.band,
            attrs=dict(self.data.attrs),
        )

    def valid_fraction(self) -> float:
        return float(np.isfinite(self.values).mean()) if self.values.size else 0.0

    def __repr__(self) -> str:
        return (f"RasterImage(band={self.band!r}, timestamp={self.timestamp}, "
                f"shape={self.values.shape})")


@dataclass(frozen=True)
class RasterSeries:
    """Ordered, immutable sequence of images on one grid and one band.

    Raises
    ------
    DomainMismatch
        If images do not share a grid.
    ContractViolation
        If images carry different band names.
    """
    images: Tuple[RasterImage, ...] = field(default_factory=tuple)

    def __post_init__(self):
        images = tuple(self.images)
        object.__setattr__(self, "images", images)
        if not images:
            return
        first = images[0]
        for image in images[1:]:
            require(
                image.band == first.band,
                f"Series contract violated: band {image.band!r} at {image.timestamp} "
                f"differs from {first.band!r}"
            )
            require(
                image.domain.matches(first.domain),
                f"Series contract violated: grid {image.domain.shape} at {image.timestamp} "
                f"differs from {first.domain.shape}",
                DomainMismatch,
            )

    def __len__(self) -> int:
        return len(self.images)

    def __iter__(self) -> Iterator[RasterImage]:
        return iter(self.images)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return RasterSeries(self.images[index])
        return self.images[index]

    @property
    def band(self) -> Optional[str]:
        return self.images[0].band if self.images else None

    @property
    def domain(self) -> Optional[SpatialDomain]:
        return self.images[0].domain if self.images else None

    @property
    def timestamps(self) -> pd.DatetimeIndex:
        return pd.DatetimeIndex([image.timestamp for image in self.images])

    def is_sorted(self, descending: bool = False) -> bool:
        ts = self.timestamps
        return ts.is_monotonic_decreasing if descending else ts.is_monotonic_increasing

    def to_dataarray(self, name: Optional[str] = None) -> xr.DataArray:
        """Stack into a (time, y, x) DataArray."""
        require(len(self) > 0, "Cannot stack an empty RasterSeries")
        stacked = xr.concat([image.data for image in self.images], dim="time")
        stacked = stacked.assign_coords(time=self.timestamps.values)
        stacked.name = name or self.band
        return stacked

    @classmethod
    def from_dataarray(cls, da: xr.DataArray, band: Optional[str] = None) -> "RasterSeries":
        """Split a (time, y, x) DataArray into a series, keeping time order."""
        band = band or da.name
        require(band is not None, "from_dataarray needs a band name")
        return cls(tuple(
            RasterImage(da.isel(time=i).drop_vars("time", errors="ignore"), da["time"].values[i], band)
            for i in range(da.sizes["time"])
        ))


class LazyRasterSeries:
    """Finite, non-restartable sequence of images produced on demand.

    Providers hand one of these out instead of a materialized series so that
    images are decoded only while being consumed. Iterating a second time
    raises ContractViolation.
    """

    def __init__(self, source: Iterable[RasterImage], description: str = ""):
        self._source = source
        self._consumed = False
        self.description = description

    @property
    def consumed(self) -> bool:
        return self._consumed

    def __iter__(self) -> Iterator[RasterImage]:
        if self._consumed:
            raise ContractViolation(
                f"LazyRasterSeries already consumed ({self.description or 'unnamed'}); "
                "it cannot be restarted"
            )
        self._consumed = True
        return iter(self._source)

    def materialize(self) -> RasterSeries:
        return RasterSeries(tuple(self))


def filter_by_date(series: RasterSeries, start: TimeLike, end: TimeLike) -> RasterSeries:
    """Subsequence with ``start <= timestamp <= end`` (closed), order preserved.

    Raises
    ------
    ValueError
        If start is after end.
    EmptyRange
        If no image falls in the window.
    """
    start_ts, end_ts = to_timestamp(start), to_timestamp(end)
    if start_ts > end_ts:
        raise ValueError(f"Invalid date window: start {start_ts} is after end {end_ts}")

    kept = tuple(image for image in series if start_ts <= image.timestamp <= end_ts)
    if not kept:
        raise EmptyRange(
            f"No {series.band or ''} images between {start_ts.date()} and {end_ts.date()} "
            f"(series has {len(series)} images)"
        )
    logger.debug("Date filter %s..%s kept %d of %d images",
                 start_ts.date(), end_ts.date(), len(kept), len(series))
    return RasterSeries(kept)


def sort_by_time(series: RasterSeries, descending: bool = False) -> RasterSeries:
    """Stable-sorted copy of ``series`` by timestamp."""
    return RasterSeries(tuple(
        sorted(series.images, key=lambda image: image.timestamp, reverse=descending)
    ))
