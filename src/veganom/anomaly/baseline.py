"""Reference-period baseline: per-pixel mean over a closed date window.

No-data policy is explicit:

- ``skip`` (default): mean over the images where the pixel is valid; a
  pixel missing in every image of the window stays missing.
- ``propagate``: a pixel missing in any image of the window is missing in
  the baseline.
"""

import logging
from typing import Iterable, Union

from veganom.contracts.failure import EmptyRange, InsufficientBaselineData
from veganom.raster.model import RasterImage, RasterSeries, TimeLike, filter_by_date

__all__ = ['NODATA_POLICIES', 'build_baseline']

logger = logging.getLogger(__name__)

NODATA_POLICIES = ("skip", "propagate")


def build_baseline(series: Union[RasterSeries, Iterable[RasterImage]],
                   start: TimeLike, end: TimeLike,
                   nodata_policy: str = "skip") -> RasterImage:
    """Mean of the images of ``series`` with ``start <= timestamp <= end``.

    Parameters
    ----------
    series : RasterSeries or iterable of RasterImage
        Full clipped series. Only the window is averaged.
    start, end : str, datetime or Timestamp
        Closed reference window.
    nodata_policy : {"skip", "propagate"}
        How missing pixels combine, see module docstring.

    Returns
    -------
    RasterImage
        Baseline tagged with the series' first timestamp. Attributes record
        the window, the image count and the policy.

    Raises
    ------
    InsufficientBaselineData
        If the window holds no images.
    DomainMismatch
        If the images do not share a grid.
    ValueError
        If ``nodata_policy`` is unknown or start is after end.
    """
    if nodata_policy not in NODATA_POLICIES:
        raise ValueError(f"Unknown nodata_policy {nodata_policy!r}, expected one of {NODATA_POLICIES}")
    if not isinstance(series, RasterSeries):
        series = RasterSeries(tuple(series))

    try:
        window = filter_by_date(series, start, end)
    except EmptyRange as e:
        raise InsufficientBaselineData(f"Baseline window is empty: {e}") from e

    stacked = window.to_dataarray()
    mean = stacked.mean(dim="time", skipna=(nodata_policy == "skip"))

    domain = window.domain
    baseline = RasterImage.from_array(
        mean.values, domain.y, domain.x,
        timestamp=series.timestamps.min(),
        band=window.band,
        attrs={
            "baseline_start": str(window.timestamps[0]),
            "baseline_end": str(window.timestamps[-1]),
            "baseline_n_images": len(window),
            "nodata_policy": nodata_policy,
        },
    )

    logger.info("Baseline built from %d %s images (%s .. %s, nodata=%s, valid=%.1f%%)",
                len(window), window.band, window.timestamps[0].date(),
                window.timestamps[-1].date(), nodata_policy, 100 * baseline.valid_fraction())
    return baseline
