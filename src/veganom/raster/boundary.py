"""Static region boundary used to clip every raster.

The boundary is a shapely polygon (or multipolygon) in lon/lat degrees,
supplied once at startup. Clipping masks pixels whose centre falls outside
the geometry to NaN, the same way the data provider masks its own no-data.
"""

import json
import logging
from pathlib import Path
from typing import Union

import numpy as np
import shapely
from shapely.geometry import box, shape
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

from veganom.contracts.base import require
from veganom.raster.model import RasterImage, SpatialDomain

__all__ = ['Boundary']

logger = logging.getLogger(__name__)


class Boundary:
    """Immutable clipping region.

    Parameters
    ----------
    geometry : shapely geometry
        Polygon or MultiPolygon in lon/lat degrees.

    Examples
    --------
    >>> region = Boundary.from_bounds(60.0, 25.0, 105.0, 40.0)
    >>> clipped = region.clip(image)
    """

    def __init__(self, geometry: BaseGeometry):
        require(
            isinstance(geometry, BaseGeometry) and not geometry.is_empty,
            "Boundary contract violated: geometry is empty or not a shapely geometry"
        )
        require(
            geometry.geom_type in ("Polygon", "MultiPolygon"),
            f"Boundary contract violated: got {geometry.geom_type}, expected Polygon or MultiPolygon"
        )
        self._geometry = geometry
        shapely.prepare(self._geometry)

    @property
    def geometry(self) -> BaseGeometry:
        return self._geometry

    @property
    def bounds(self):
        return self._geometry.bounds

    @classmethod
    def from_bounds(cls, minx: float, miny: float, maxx: float, maxy: float) -> "Boundary":
        return cls(box(minx, miny, maxx, maxy))

    @classmethod
    def from_geojson(cls, path: Union[str, Path]) -> "Boundary":
        """Read a GeoJSON geometry, Feature or FeatureCollection.

        Features of a collection are merged into one geometry.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Boundary file not found: {path}")
        with open(path) as f:
            doc = json.load(f)

        kind = doc.get("type")
        if kind == "FeatureCollection":
            geoms = [shape(feat["geometry"]) for feat in doc.get("features", [])
                     if feat.get("geometry")]
            if not geoms:
                raise ValueError(f"No geometries in FeatureCollection: {path}")
            geometry = unary_union(geoms)
        elif kind == "Feature":
            geometry = shape(doc["geometry"])
        else:
            geometry = shape(doc)

        logger.info("Boundary loaded: %s (%s, bounds=%s)", path.name, geometry.geom_type,
                    tuple(round(b, 3) for b in geometry.bounds))
        return cls(geometry)

    def mask(self, domain: SpatialDomain) -> np.ndarray:
        """Boolean (y, x) mask, True where the pixel centre is inside or on the edge."""
        xx, yy = np.meshgrid(domain.x, domain.y)
        return shapely.intersects_xy(self._geometry, xx, yy)

    def clip(self, image: RasterImage) -> RasterImage:
        """Copy of ``image`` with pixels outside the boundary set to NaN."""
        inside = self.mask(image.domain)
        return image.with_values(np.where(inside, image.values, np.nan))

    def __repr__(self) -> str:
        return f"Boundary({self._geometry.geom_type}, bounds={self.bounds})"
