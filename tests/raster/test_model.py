"""Tests for the immutable raster model and date filtering."""

import numpy as np
import pandas as pd
import pytest
import xarray as xr

pytestmark = pytest.mark.unit

from veganom.contracts import ContractViolation, DomainMismatch, EmptyRange
from veganom.raster.model import (
    LazyRasterSeries,
    RasterImage,
    RasterSeries,
    SpatialDomain,
    filter_by_date,
    sort_by_time,
    to_timestamp,
)
from tests.helpers.fake_series import LAT, LON, SHAPE, make_image, make_series


class TestRasterImage:
    """Test RasterImage construction and immutability."""

    def test_values_are_read_only_float64(self):
        """Image arrays cannot be modified in place."""
        image = make_image(np.arange(12).reshape(SHAPE))
        assert image.values.dtype == np.float64
        with pytest.raises(ValueError):
            image.values[0, 0] = 99.0

    def test_source_array_is_copied(self):
        """Mutating the caller's array does not change the image."""
        source = np.ones(SHAPE)
        image = make_image(source)
        source[0, 0] = 5.0
        assert image.values[0, 0] == 1.0

    def test_requires_y_x_dims(self):
        """A DataArray with other dims violates the raster contract."""
        da = xr.DataArray(np.ones(SHAPE), dims=("lat", "lon"))
        with pytest.raises(ContractViolation, match="dims"):
            RasterImage(da, "2001-01-01", "EVI")

    def test_timestamp_normalized_to_naive_utc(self):
        image = make_image(1, timestamp=pd.Timestamp("2001-01-01T06:00+05:45"))
        assert image.timestamp.tzinfo is None
        assert image.timestamp == pd.Timestamp("2001-01-01T00:15")

    def test_with_values_keeps_grid_band_and_timestamp(self):
        image = make_image(1, timestamp="2001-01-01")
        other = image.with_values(np.zeros(SHAPE))
        assert other.domain.matches(image.domain)
        assert other.band == "EVI"
        assert other.timestamp == image.timestamp
        assert np.all(other.values == 0)

    def test_with_values_can_restamp(self):
        image = make_image(1, timestamp="2001-01-01")
        assert image.with_values(image.values, "2002-01-01").timestamp == to_timestamp("2002-01-01")

    def test_zeros_is_valid_everywhere(self):
        zeros = RasterImage.zeros(make_image(1).domain, "2001-01-01", "EVI")
        assert zeros.valid_fraction() == 1.0
        assert np.all(zeros.values == 0)

    def test_valid_fraction_counts_nan_as_missing(self):
        values = np.ones(SHAPE)
        values[0, :] = np.nan
        assert make_image(values).valid_fraction() == pytest.approx(8 / 12)


class TestSpatialDomain:
    """Test grid comparison and extent."""

    def test_matches_identical_grids(self):
        assert make_image(1).domain.matches(make_image(2).domain)

    def test_extent_is_pixel_edges(self):
        xmin, ymin, xmax, ymax = make_image(1).domain.extent()
        assert xmin == pytest.approx(85.295)
        assert xmax == pytest.approx(85.335)
        assert ymin == pytest.approx(27.695)
        assert ymax == pytest.approx(27.725)

    def test_single_row_extent_borrows_column_spacing(self):
        domain = SpatialDomain(y=np.array([27.7]), x=np.array([85.30, 85.31, 85.32]))
        xmin, ymin, xmax, ymax = domain.extent()
        assert xmin == pytest.approx(85.295)
        assert xmax == pytest.approx(85.325)
        assert ymin == pytest.approx(27.695)
        assert ymax == pytest.approx(27.705)

    def test_single_column_extent_borrows_row_spacing(self):
        domain = SpatialDomain(y=np.array([27.70, 27.72]), x=np.array([85.3]))
        xmin, _, xmax, _ = domain.extent()
        assert xmin == pytest.approx(85.29)
        assert xmax == pytest.approx(85.31)

    def test_single_pixel_extent_is_its_centre(self):
        domain = SpatialDomain(y=np.array([27.7]), x=np.array([85.3]))
        assert domain.extent() == (85.3, 27.7, 85.3, 27.7)


class TestRasterSeries:
    """Test series invariants and conversions."""

    def test_mixed_grids_raise_domain_mismatch(self):
        images = (make_image(1), make_image(2, lon=LON + 1.0))
        with pytest.raises(DomainMismatch):
            RasterSeries(images)

    def test_mixed_bands_raise_contract_violation(self):
        images = (make_image(1, band="EVI"), make_image(2, band="NDVI"))
        with pytest.raises(ContractViolation, match="band"):
            RasterSeries(images)

    def test_empty_series_has_no_band(self):
        series = RasterSeries()
        assert len(series) == 0
        assert series.band is None
        assert series.is_sorted()

    def test_slice_returns_series(self):
        series = make_series([1, 2, 3], ["2001-01-01", "2001-02-01", "2001-03-01"])
        head = series[:2]
        assert isinstance(head, RasterSeries)
        assert len(head) == 2

    def test_dataarray_roundtrip_keeps_time_order(self):
        """Stacking then splitting preserves values and timestamps."""
        series = make_series([3, 1, 2], ["2001-01-01", "2001-02-01", "2001-03-01"])
        da = series.to_dataarray()
        assert da.dims == ("time", "y", "x")
        back = RasterSeries.from_dataarray(da)
        assert list(back.timestamps) == list(series.timestamps)
        assert [img.values[0, 0] for img in back] == [3.0, 1.0, 2.0]


class TestLazyRasterSeries:
    """Provider sequences are finite and non-restartable."""

    def test_iterates_once(self):
        lazy = LazyRasterSeries(iter([make_image(1)]), description="test")
        assert len(list(lazy)) == 1
        assert lazy.consumed

    def test_second_iteration_raises(self):
        lazy = LazyRasterSeries([make_image(1)], description="test")
        list(lazy)
        with pytest.raises(ContractViolation, match="already consumed"):
            list(lazy)

    def test_materialize(self):
        lazy = LazyRasterSeries([make_image(1), make_image(2, "2001-02-01")])
        series = lazy.materialize()
        assert isinstance(series, RasterSeries)
        assert len(series) == 2


class TestFilterAndSort:
    """Test date windows and ordering."""

    @pytest.fixture
    def series(self):
        return make_series([1, 2, 3, 4],
                           ["2001-01-01", "2003-06-01", "2005-12-31", "2006-01-01"])

    def test_window_is_closed_on_both_ends(self, series):
        window = filter_by_date(series, "2001-01-01", "2005-12-31")
        assert [img.values[0, 0] for img in window] == [1.0, 2.0, 3.0]

    def test_empty_window_raises_empty_range(self, series):
        with pytest.raises(EmptyRange):
            filter_by_date(series, "1990-01-01", "1995-01-01")

    def test_inverted_window_raises_value_error(self, series):
        with pytest.raises(ValueError, match="after end"):
            filter_by_date(series, "2005-01-01", "2001-01-01")

    def test_filter_preserves_order(self):
        series = make_series([2, 1], ["2002-01-01", "2001-01-01"])
        window = filter_by_date(series, "2000-01-01", "2010-01-01")
        assert [img.values[0, 0] for img in window] == [2.0, 1.0]

    def test_sort_ascending_and_descending(self):
        series = make_series([2, 1, 3], ["2002-01-01", "2001-01-01", "2003-01-01"])
        assert sort_by_time(series).is_sorted()
        assert sort_by_time(series, descending=True).is_sorted(descending=True)

    def test_sort_is_stable_for_equal_timestamps(self):
        series = make_series([1, 2, 0], ["2001-01-01", "2001-01-01", "2000-01-01"])
        ordered = sort_by_time(series)
        assert [img.values[0, 0] for img in ordered] == [0.0, 1.0, 2.0]
