"""Point sampling of a raster series for charting.

For each image, the pixels whose centre lies within ``radius`` metres of the
clicked (lon, lat) are ordered nearest first (row-major among equal
distances) and reduced with a deterministic "first valid pixel" reducer.
This is not an average: a valid pixel under the click wins. When no pixel
centre falls inside the radius but the point is on the grid, the nearest
pixel is used, so a radius smaller than the pixel size still samples the
pixel under the click.

Timestamps with no valid pixel are omitted. A click outside the valid
coverage therefore returns an empty list, which callers treat as "ignore
this click". Only a malformed coordinate raises.
"""

import logging
import math
import numbers
import threading
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from veganom.contracts.base import require
from veganom.contracts.failure import InvalidCoordinate, SamplingCancelled
from veganom.raster.model import RasterImage, SpatialDomain

__all__ = [
    'EARTH_RADIUS_M',
    'validate_coordinate',
    'neighbourhood',
    'first_valid',
    'has_valid_data',
    'sample_at_point',
]

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6371008.8

Coordinate = Union[Sequence[float], Mapping[str, float]]


def _is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def validate_coordinate(coordinate: Coordinate, radius: float = 0.0) -> Tuple[float, float]:
    """Return ``(lon, lat)`` as floats or raise InvalidCoordinate.

    Accepts a ``(lon, lat)`` pair or a mapping with ``lon`` and ``lat`` keys,
    the shape of a map click event.
    """
    if isinstance(coordinate, Mapping):
        require("lon" in coordinate and "lat" in coordinate,
                f"Coordinate {coordinate!r} needs 'lon' and 'lat'", InvalidCoordinate)
        lon, lat = coordinate["lon"], coordinate["lat"]
    else:
        try:
            lon, lat = coordinate
        except (TypeError, ValueError):
            raise InvalidCoordinate(f"Coordinate {coordinate!r} is not a (lon, lat) pair") from None

    require(_is_number(lon) and _is_number(lat),
            f"Coordinate ({lon!r}, {lat!r}) is not numeric", InvalidCoordinate)
    lon, lat = float(lon), float(lat)
    require(math.isfinite(lon) and math.isfinite(lat),
            f"Coordinate ({lon}, {lat}) is not finite", InvalidCoordinate)
    require(-180.0 <= lon <= 180.0, f"Longitude {lon} outside [-180, 180]", InvalidCoordinate)
    require(-90.0 <= lat <= 90.0, f"Latitude {lat} outside [-90, 90]", InvalidCoordinate)
    require(_is_number(radius) and math.isfinite(radius) and radius >= 0,
            f"Sampling radius {radius!r} must be a finite non-negative number", InvalidCoordinate)
    return lon, lat


def _distance_m(lon: float, lat: float, xx: np.ndarray, yy: np.ndarray) -> np.ndarray:
    """Equirectangular distance in metres from (lon, lat) to every pixel centre."""
    dlon = np.radians((xx - lon + 180.0) % 360.0 - 180.0)
    dlat = np.radians(yy - lat)
    mean_lat = np.radians((yy + lat) / 2.0)
    return EARTH_RADIUS_M * np.hypot(dlon * np.cos(mean_lat), dlat)


def neighbourhood(domain: SpatialDomain, lon: float, lat: float,
                  radius: float) -> Tuple[np.ndarray, np.ndarray]:
    """Row and column indices of the sampled pixels, nearest first.

    Pixels at equal distance keep row-major order. Empty when no pixel
    centre is within ``radius`` and the point lies outside the grid extent.
    """
    yy, xx = np.meshgrid(domain.y, domain.x, indexing="ij")
    dist = _distance_m(lon, lat, xx, yy).ravel()
    inside = np.flatnonzero(dist <= radius)
    if inside.size:
        order = inside[np.argsort(dist[inside], kind="stable")]
        return np.unravel_index(order, domain.shape)

    xmin, ymin, xmax, ymax = domain.extent()
    if not (xmin <= lon <= xmax and ymin <= lat <= ymax):
        empty = np.array([], dtype=int)
        return empty, empty
    row, col = np.unravel_index(np.argmin(dist), domain.shape)
    return np.array([row]), np.array([col])


def first_valid(values: np.ndarray, rows: np.ndarray, cols: np.ndarray) -> Optional[float]:
    """First finite value among ``values[rows, cols]``, or None."""
    picked = values[rows, cols]
    valid = np.flatnonzero(np.isfinite(picked))
    if valid.size == 0:
        return None
    return float(picked[valid[0]])


def has_valid_data(image: RasterImage, coordinate: Coordinate, radius: float) -> bool:
    """True when ``image`` has a valid pixel at the coordinate.

    Used as the click guard: the first image of the clipped input series is
    tested before charting.
    """
    lon, lat = validate_coordinate(coordinate, radius)
    rows, cols = neighbourhood(image.domain, lon, lat, radius)
    return first_valid(image.values, rows, cols) is not None


def sample_at_point(series: Iterable[RasterImage], coordinate: Coordinate, radius: float,
                    cancel_event: Optional[threading.Event] = None
                    ) -> List[Tuple[pd.Timestamp, float]]:
    """Scalar time series of ``series`` at a point.

    Parameters
    ----------
    series : RasterSeries or iterable of RasterImage
        Typically the cumulative anomaly series.
    coordinate : (lon, lat) or mapping with lon/lat
        Clicked location in degrees.
    radius : float
        Neighbourhood radius in metres.
    cancel_event : threading.Event, optional
        Checked before each image; when set the request is abandoned.

    Returns
    -------
    list of (Timestamp, float)
        In series order. Empty when no image has a valid pixel there.

    Raises
    ------
    InvalidCoordinate
        If the coordinate or radius is malformed.
    SamplingCancelled
        If ``cancel_event`` is set while sampling.
    """
    lon, lat = validate_coordinate(coordinate, radius)

    samples = []
    indices = None
    domain = None
    for image in series:
        if cancel_event is not None and cancel_event.is_set():
            raise SamplingCancelled(f"Sampling at ({lon}, {lat}) superseded")
        if domain is None or not image.domain.matches(domain):
            domain = image.domain
            indices = neighbourhood(domain, lon, lat, radius)
        value = first_valid(image.values, *indices)
        if value is not None:
            samples.append((image.timestamp, value))

    if not samples:
        logger.debug("No valid data at (%.4f, %.4f) within %.0f m", lon, lat, radius)
    return samples
