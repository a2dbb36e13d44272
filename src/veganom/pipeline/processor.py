"""Vegetation-index anomaly processing pipeline.

Runs a clipped raster series through the baseline, anomaly, cumulative and
total stages and returns an immutable AnomalyContext. Each stage is followed
by its contract check.
"""

import logging
from typing import TYPE_CHECKING

import numpy as np

from veganom.anomaly import accumulate, build_baseline, map_anomalies, total_anomaly
from veganom.contracts import (
    ContractViolation,
    DataSparsityError,
    EmptyRange,
    assert_anomalies,
    assert_baseline,
    assert_cumulative,
    assert_raster_series,
)
from veganom.pipeline.context import AnomalyContext
from veganom.raster.boundary import Boundary
from veganom.raster.model import RasterSeries, filter_by_date
from veganom.raster.provider import RasterProvider, load

if TYPE_CHECKING:
    from veganom.schemas import InternalConfig

__all__ = ['AnomalyProcessor']

logger = logging.getLogger(__name__)


class AnomalyProcessor:
    """Computes cumulative vegetation-index anomalies for one region.

    **Processing Pipeline:**

    1. **Load**: Pull the configured band from the provider and clip every
       image to the boundary. Result is sorted by time.

    2. **Baseline**: Per-pixel mean over the reference window, honouring
       the configured no-data policy.

    3. **Anomalies**: Target-window images minus the baseline.

    4. **Cumulative**: Sequential running sum of the anomalies.

    5. **Total**: Per-pixel sum of the anomalies (net change map).

    **Failure handling:**

    Contract violations are pipeline bugs: they are logged as critical and
    re-raised. Data-sparsity errors (empty windows, missing band) are logged
    and re-raised for the caller to decide. An empty target window is
    tolerated only with ``anomaly.allow_empty_target``.

    Example usage::

        processor = AnomalyProcessor(config)
        context = processor.run(provider, boundary)
        context.sample_at_point((85.3, 27.7))
    """

    def __init__(self, config: "InternalConfig"):
        self.config = config
        self.band = config.global_.band

    def run(self, provider: RasterProvider, boundary: Boundary) -> AnomalyContext:
        """Run every stage and return the resulting context.

        Raises
        ------
        ContractViolation
            A stage broke its guarantees (including DomainMismatch).
        DataSparsityError
            The provider, the reference window or (unless allowed) the
            target window yielded no images.
        """
        try:
            series = load(provider, boundary, self.band)
            assert_raster_series(series, self.band)

            reference = self.config.reference
            baseline = build_baseline(
                series, reference.start, reference.end,
                nodata_policy=self.config.baseline.nodata_policy,
            )
            assert_baseline(baseline, series)

            target = self._select_target(series)
            anomalies = map_anomalies(target, baseline)
            assert_anomalies(anomalies, target)

            if len(anomalies) > 0:
                cumulative = accumulate(anomalies)
                assert_cumulative(cumulative, anomalies)
                total = total_anomaly(anomalies)
            else:
                cumulative = RasterSeries()
                total = None

        except ContractViolation as e:
            logger.critical("CRITICAL: Pipeline contract violated: %s", e)
            logger.critical("This indicates a bug in pipeline logic or inconsistent input. Stopping.")
            raise

        except DataSparsityError as e:
            logger.error("No data for %s: %s", self.band, e)
            raise

        context = AnomalyContext(
            config=self.config,
            boundary=boundary,
            series=series,
            baseline=baseline,
            anomalies=anomalies,
            cumulative=cumulative,
            total=total,
        )
        self._log_summary(context)
        return context

    def _select_target(self, series: RasterSeries) -> RasterSeries:
        target_cfg = self.config.target
        try:
            return filter_by_date(series, target_cfg.start, target_cfg.end)
        except EmptyRange:
            if not self.config.anomaly.allow_empty_target:
                raise
            logger.warning("Target window %s .. %s is empty; producing no anomalies",
                           target_cfg.start, target_cfg.end)
            return RasterSeries()

    def _log_summary(self, context: AnomalyContext):
        """Log a short summary of the run."""
        logger.info("Anomaly run complete: %d input, %d anomaly images",
                    len(context.series), len(context.anomalies))
        if context.total is None:
            return
        values = context.total.values
        if not np.isfinite(values).any():
            logger.warning("Total anomaly has no valid pixels")
            return
        logger.info("   Total anomaly: min=%.4f, mean=%.4f, max=%.4f, valid=%.1f%%",
                    np.nanmin(values), np.nanmean(values), np.nanmax(values),
                    100 * context.total.valid_fraction())
