"""Tests for reference-period baseline construction."""

import numpy as np
import pandas as pd
import pytest

pytestmark = pytest.mark.unit

from veganom.anomaly.baseline import build_baseline
from veganom.contracts import DomainMismatch, InsufficientBaselineData
from tests.helpers.fake_series import LON, SHAPE, make_image, make_series


class TestBuildBaseline:
    """Test the per-pixel reference mean."""

    def test_mean_of_reference_window(self):
        """Reference [10, 20, 30] gives baseline 20; later images are ignored."""
        series = make_series([10, 20, 30, 100],
                             ["2001-03-01", "2003-03-01", "2005-03-01", "2007-03-01"])
        baseline = build_baseline(series, "2001-01-01", "2005-12-31")

        np.testing.assert_allclose(baseline.values, 20.0)
        assert baseline.band == "EVI"

    def test_tagged_with_first_series_timestamp(self):
        series = make_series([10, 20], ["2000-06-01", "2002-03-01"])
        baseline = build_baseline(series, "2001-01-01", "2005-12-31")
        assert baseline.timestamp == pd.Timestamp("2000-06-01")

    def test_single_image_window_returns_that_image(self):
        values = np.arange(12, dtype=float).reshape(SHAPE)
        series = make_series([values, 99.0], ["2003-01-01", "2010-01-01"])
        baseline = build_baseline(series, "2001-01-01", "2005-12-31")
        np.testing.assert_array_equal(baseline.values, values)

    def test_empty_window_raises_insufficient_baseline(self):
        series = make_series([1, 2], ["2010-01-01", "2011-01-01"])
        with pytest.raises(InsufficientBaselineData):
            build_baseline(series, "2001-01-01", "2005-12-31")

    def test_attrs_record_window(self):
        series = make_series([10, 20], ["2001-03-01", "2005-03-01"])
        baseline = build_baseline(series, "2001-01-01", "2005-12-31")
        attrs = baseline.data.attrs
        assert attrs["baseline_n_images"] == 2
        assert attrs["nodata_policy"] == "skip"

    def test_accepts_plain_list(self):
        images = [make_image(2, "2001-01-01"), make_image(4, "2002-01-01")]
        baseline = build_baseline(images, "2001-01-01", "2005-12-31")
        np.testing.assert_allclose(baseline.values, 3.0)

    def test_mismatched_grids_raise(self):
        images = [make_image(2, "2001-01-01"), make_image(4, "2002-01-01", lon=LON + 1)]
        with pytest.raises(DomainMismatch):
            build_baseline(images, "2001-01-01", "2005-12-31")

    def test_unknown_policy_raises(self):
        series = make_series([1], ["2001-01-01"])
        with pytest.raises(ValueError, match="nodata_policy"):
            build_baseline(series, "2001-01-01", "2005-12-31", nodata_policy="zero")


class TestBaselineNoData:
    """Test the explicit no-data policies."""

    @pytest.fixture
    def gappy_series(self):
        first = np.full(SHAPE, 10.0)
        first[0, 0] = np.nan
        second = np.full(SHAPE, 20.0)
        both_missing = np.full(SHAPE, 30.0)
        second[1, 1] = np.nan
        both_missing[1, 1] = np.nan
        first[1, 1] = np.nan
        return make_series([first, second, both_missing],
                           ["2001-01-01", "2002-01-01", "2003-01-01"])

    def test_skip_averages_valid_images(self, gappy_series):
        baseline = build_baseline(gappy_series, "2001-01-01", "2005-12-31", "skip")
        assert baseline.values[0, 0] == pytest.approx(25.0)
        assert baseline.values[2, 3] == pytest.approx(20.0)

    def test_skip_keeps_all_missing_pixel_missing(self, gappy_series):
        baseline = build_baseline(gappy_series, "2001-01-01", "2005-12-31", "skip")
        assert np.isnan(baseline.values[1, 1])

    def test_propagate_marks_any_gap_missing(self, gappy_series):
        baseline = build_baseline(gappy_series, "2001-01-01", "2005-12-31", "propagate")
        assert np.isnan(baseline.values[0, 0])
        assert np.isnan(baseline.values[1, 1])
        assert baseline.values[2, 3] == pytest.approx(20.0)
