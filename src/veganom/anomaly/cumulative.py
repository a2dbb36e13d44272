"""Cumulative anomaly: a strict left fold over chronological order.

The fold starts from a zero image stamped with the first timestamp and adds
each anomaly to the most recently produced result:

    acc_0 = 0
    acc_i = a_i + acc_{i-1}        (tagged with a_i.timestamp)

The zero seed is internal; the returned series holds acc_1 .. acc_n, one
element per anomaly. The loop is intentionally sequential: every step adds
exactly one image to the previous result, so the floating-point summation
order is fixed by time order and results are bit-reproducible.

Missing pixels propagate through addition; once a pixel is missing in one
step it stays missing in every later step.
"""

import logging
from typing import Iterable, Union

from veganom.contracts.base import require
from veganom.contracts.failure import DomainMismatch, EmptyInput
from veganom.raster.model import RasterImage, RasterSeries

__all__ = ['accumulate']

logger = logging.getLogger(__name__)


def accumulate(anomalies: Union[RasterSeries, Iterable[RasterImage]]) -> RasterSeries:
    """Running sum of ``anomalies`` in ascending timestamp order.

    Parameters
    ----------
    anomalies : RasterSeries or iterable of RasterImage
        Anomaly images. Out-of-order input is stable-sorted by timestamp
        before folding (with a warning).

    Returns
    -------
    RasterSeries
        Same length and timestamps as the (sorted) input.

    Raises
    ------
    EmptyInput
        If there is nothing to accumulate.
    DomainMismatch
        If an image's grid diverges from the running accumulator's.

    Examples
    --------
    >>> cumulative = accumulate(map_anomalies(target, baseline))
    >>> cumulative[-1]   # net anomaly at the last timestamp
    """
    images = list(anomalies)
    if not images:
        raise EmptyInput("Nothing to accumulate: anomaly series is empty")

    ordered = sorted(images, key=lambda image: image.timestamp)
    if any(a is not b for a, b in zip(ordered, images)):
        logger.warning("Anomaly series was not in chronological order; "
                       "sorted %d images before accumulating", len(images))

    first = ordered[0]
    acc = RasterImage.zeros(first.domain, first.timestamp, first.band)

    cumulative = []
    for image in ordered:
        require(
            image.domain.matches(acc.domain),
            f"Cumulative contract violated: image at {image.timestamp} has grid "
            f"{image.domain.shape}, accumulator has {acc.domain.shape}",
            DomainMismatch,
        )
        require(
            image.band == acc.band,
            f"Cumulative contract violated: band {image.band!r} != {acc.band!r}"
        )
        acc = image.with_values(image.values + acc.values)
        cumulative.append(acc)

    logger.info("Accumulated %d anomaly images (%s .. %s)", len(cumulative),
                cumulative[0].timestamp.date(), cumulative[-1].timestamp.date())
    return RasterSeries(tuple(cumulative))
