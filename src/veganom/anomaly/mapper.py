"""Per-image anomaly against a baseline, and the net (total) anomaly map."""

import logging
from typing import Iterable, Union

from veganom.contracts.base import require
from veganom.contracts.failure import DomainMismatch, EmptyInput
from veganom.raster.model import RasterImage, RasterSeries

__all__ = ['map_anomalies', 'total_anomaly']

logger = logging.getLogger(__name__)


def map_anomalies(series: Union[RasterSeries, Iterable[RasterImage]],
                  baseline: RasterImage) -> RasterSeries:
    """Subtract ``baseline`` from every image, keeping each timestamp.

    ``series`` is expected to be filtered to the target period already.
    A pixel missing in either operand is missing in the anomaly.

    Raises
    ------
    DomainMismatch
        If an image's grid differs from the baseline's.
    """
    anomalies = []
    for image in series:
        require(
            image.domain.matches(baseline.domain),
            f"Anomaly contract violated: image at {image.timestamp} has grid "
            f"{image.domain.shape}, baseline has {baseline.domain.shape}",
            DomainMismatch,
        )
        require(
            image.band == baseline.band,
            f"Anomaly contract violated: image band {image.band!r} != baseline band {baseline.band!r}"
        )
        anomalies.append(image.with_values(image.values - baseline.values))

    logger.debug("Mapped %d anomaly images", len(anomalies))
    return RasterSeries(tuple(anomalies))


def total_anomaly(anomalies: RasterSeries) -> RasterImage:
    """Per-pixel sum of all anomalies (net vegetation change).

    A pixel is missing only where it is missing in every anomaly image.

    Raises
    ------
    EmptyInput
        If ``anomalies`` is empty.
    """
    if len(anomalies) == 0:
        raise EmptyInput("Cannot sum an empty anomaly series")

    total = anomalies.to_dataarray().sum(dim="time", skipna=True, min_count=1)
    return anomalies[0].with_values(total.values)
