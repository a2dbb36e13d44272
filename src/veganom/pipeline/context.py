"""Immutable result of one pipeline run.

AnomalyContext replaces shared mutable state: it is built once by the
processor and handed to consumers (map layer, chart, sampling worker).
Every series it holds is immutable, so a context can be read from several
threads at once.
"""

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional, Tuple, TYPE_CHECKING

import pandas as pd

from veganom.anomaly.sampler import Coordinate, has_valid_data, sample_at_point
from veganom.raster.boundary import Boundary
from veganom.raster.model import RasterImage, RasterSeries

if TYPE_CHECKING:
    from veganom.schemas import InternalConfig

__all__ = ['AnomalyContext']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnomalyContext:
    """Everything computed for one band, boundary and pair of periods.

    Attributes
    ----------
    config : InternalConfig
        Configuration the run was made with.
    boundary : Boundary
        Region of interest the inputs were clipped to.
    series : RasterSeries
        Full clipped input series, ascending.
    baseline : RasterImage
        Reference-period mean.
    anomalies : RasterSeries
        Target images minus baseline. Empty only when the target window was
        empty and that was allowed.
    cumulative : RasterSeries
        Running sum of ``anomalies``.
    total : RasterImage or None
        Per-pixel sum of ``anomalies``; None when there are no anomalies.
    """
    config: "InternalConfig"
    boundary: Boundary
    series: RasterSeries
    baseline: RasterImage
    anomalies: RasterSeries
    cumulative: RasterSeries
    total: Optional[RasterImage]

    @property
    def band(self) -> str:
        return self.series.band

    def get_cumulative_series(self) -> RasterSeries:
        """Cumulative anomaly series for the chart consumer."""
        return self.cumulative

    def sample_at_point(self, coordinate: Coordinate,
                        cancel_event: Optional[threading.Event] = None
                        ) -> List[Tuple[pd.Timestamp, float]]:
        """Cumulative anomaly time series at a clicked point.

        When ``sampler.require_valid_first`` is set, a click where the first
        input image has no valid pixel is ignored and yields an empty list.

        Raises
        ------
        InvalidCoordinate
            If the coordinate is malformed.
        SamplingCancelled
            If ``cancel_event`` is set before sampling finishes.
        """
        radius = self.config.sampler.radius_m
        if self.config.sampler.require_valid_first:
            if not has_valid_data(self.series[0], coordinate, radius):
                logger.debug("Ignoring click at %s: no valid data in first image", coordinate)
                return []
        return sample_at_point(self.cumulative, coordinate, radius, cancel_event)

    def sample_to_frame(self, coordinate: Coordinate) -> pd.DataFrame:
        """Point series as a two-column DataFrame (``time``, ``cumulative_anomaly``)."""
        samples = self.sample_at_point(coordinate)
        return pd.DataFrame(
            {
                "time": pd.DatetimeIndex([ts for ts, _ in samples]),
                "cumulative_anomaly": pd.Series([value for _, value in samples], dtype="float64"),
            }
        )

    def __repr__(self) -> str:
        return (f"AnomalyContext(band={self.band!r}, images={len(self.series)}, "
                f"anomalies={len(self.anomalies)})")
