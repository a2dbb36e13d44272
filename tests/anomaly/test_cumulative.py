"""Tests for the cumulative anomaly fold."""

import logging

import numpy as np
import pytest

pytestmark = pytest.mark.unit

from veganom.anomaly.cumulative import accumulate
from veganom.contracts import DomainMismatch, EmptyInput
from veganom.raster.model import RasterSeries
from tests.helpers.fake_series import LON, SHAPE, make_image, make_series


def _values(series):
    return [float(img.values[0, 0]) for img in series]


class TestAccumulate:
    """Test the running sum."""

    def test_scenario_running_sum(self):
        """Anomalies [5, -5] accumulate to [5, 0]."""
        anomalies = make_series([5, -5], ["2007-03-01", "2009-03-01"])
        assert _values(accumulate(anomalies)) == [5.0, 0.0]

    def test_length_and_timestamps_preserved(self):
        anomalies = make_series([1, 2, 3, 4],
                                ["2006-01-01", "2006-01-17", "2006-02-02", "2006-02-18"])
        cumulative = accumulate(anomalies)
        assert len(cumulative) == len(anomalies)
        assert cumulative.timestamps.equals(anomalies.timestamps)

    def test_prefix_identity(self):
        """acc[0] == a[0] and acc[i] == acc[i-1] + a[i], pixel for pixel."""
        rng = np.random.default_rng(7)
        anomalies = make_series([rng.normal(size=SHAPE) for _ in range(6)],
                                [f"{2006 + i}-06-01" for i in range(6)])
        cumulative = accumulate(anomalies)

        np.testing.assert_array_equal(cumulative[0].values, anomalies[0].values + 0.0)
        for i in range(1, len(anomalies)):
            np.testing.assert_array_equal(
                cumulative[i].values, anomalies[i].values + cumulative[i - 1].values
            )

    def test_single_element(self):
        cumulative = accumulate(make_series([3], ["2006-01-01"]))
        assert _values(cumulative) == [3.0]

    def test_out_of_order_input_is_sorted(self, caplog):
        """Unsorted input is folded in chronological order, with a warning."""
        anomalies = make_series([2, 1, 4], ["2008-01-01", "2007-01-01", "2009-01-01"])
        with caplog.at_level(logging.WARNING, logger="veganom.anomaly.cumulative"):
            cumulative = accumulate(anomalies)

        assert cumulative.is_sorted()
        assert _values(cumulative) == [1.0, 3.0, 7.0]
        assert "chronological" in caplog.text

    def test_missing_pixel_stays_missing(self):
        first = np.full(SHAPE, 1.0)
        first[0, 1] = np.nan
        anomalies = make_series([first, 1.0, 1.0], ["2006-01-01", "2007-01-01", "2008-01-01"])
        cumulative = accumulate(anomalies)
        assert all(np.isnan(img.values[0, 1]) for img in cumulative)
        assert _values(cumulative) == [1.0, 2.0, 3.0]

    def test_empty_raises(self):
        with pytest.raises(EmptyInput):
            accumulate(RasterSeries())

    def test_empty_list_raises(self):
        with pytest.raises(EmptyInput):
            accumulate([])

    def test_grid_mismatch_raises(self):
        images = [make_image(1, "2006-01-01"), make_image(1, "2007-01-01", lon=LON + 1)]
        with pytest.raises(DomainMismatch):
            accumulate(images)

    def test_input_not_modified(self):
        anomalies = make_series([1, 2], ["2006-01-01", "2007-01-01"])
        accumulate(anomalies)
        assert _values(anomalies) == [1.0, 2.0]
