"""Stage contracts for the anomaly pipeline.

Each assert_* function is called by the processor right after the stage it
names and verifies the structural guarantees that stage promised. They do
not check science (baseline values, anomaly magnitudes), only shape, order,
band and grid.
"""

from veganom.contracts.base import require
from veganom.contracts.failure import DomainMismatch


def assert_raster_series(series, band: str, stage: str = "Load") -> None:
    """Series is non-empty, single-band, chronological.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        len(series) > 0,
        f"{stage} contract violated: series is empty"
    )
    require(
        series.band == band,
        f"{stage} contract violated: band is {series.band!r}, expected {band!r}"
    )
    require(
        series.is_sorted(),
        f"{stage} contract violated: timestamps are not ascending"
    )


def assert_same_domain(image, reference, stage: str) -> None:
    """Two rasters share one grid."""
    require(
        image.domain.matches(reference.domain),
        f"{stage} contract violated: grid {image.domain.shape} does not match "
        f"{reference.domain.shape}",
        DomainMismatch,
    )


def assert_baseline(baseline, series) -> None:
    """Baseline is on the series grid, same band, tagged with the first timestamp."""
    assert_same_domain(baseline, series[0], "Baseline")
    require(
        baseline.band == series.band,
        f"Baseline contract violated: band {baseline.band!r} != {series.band!r}"
    )
    require(
        baseline.timestamp == series.timestamps.min(),
        f"Baseline contract violated: tagged {baseline.timestamp}, "
        f"expected first series timestamp {series.timestamps.min()}"
    )


def assert_anomalies(anomalies, target) -> None:
    """One anomaly per target image, same timestamps."""
    require(
        len(anomalies) == len(target),
        f"Anomaly contract violated: {len(anomalies)} anomalies for {len(target)} target images"
    )
    require(
        anomalies.timestamps.equals(target.timestamps),
        "Anomaly contract violated: anomaly timestamps differ from target timestamps"
    )


def assert_cumulative(cumulative, anomalies) -> None:
    """One cumulative image per anomaly, ascending, same timestamp set."""
    require(
        len(cumulative) == len(anomalies),
        f"Cumulative contract violated: {len(cumulative)} results for {len(anomalies)} anomalies"
    )
    require(
        cumulative.is_sorted(),
        "Cumulative contract violated: timestamps are not ascending"
    )
    require(
        cumulative.timestamps.equals(anomalies.timestamps.sort_values()),
        "Cumulative contract violated: timestamps differ from anomaly timestamps"
    )
