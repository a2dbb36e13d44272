"""Tests for the chart-facing AnomalyContext queries."""

import numpy as np
import pandas as pd
import pytest

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]

from veganom.contracts import InvalidCoordinate
from veganom.pipeline import AnomalyProcessor
from veganom.raster.boundary import Boundary
from tests.helpers.fake_series import (
    CENTRE,
    FakeProvider,
    LAT,
    LON,
    make_series,
    scenario_provider,
)


@pytest.fixture
def context(internal_config, full_boundary):
    return AnomalyProcessor(internal_config).run(scenario_provider(), full_boundary)


class TestSampleAtPoint:
    """Test sampling through the context."""

    def test_samples_cumulative_series(self, context):
        samples = context.sample_at_point(CENTRE)
        assert samples == [(pd.Timestamp("2007-03-01"), 5.0), (pd.Timestamp("2009-03-01"), 0.0)]

    def test_mapping_coordinate(self, context):
        samples = context.sample_at_point({"lon": CENTRE[0], "lat": CENTRE[1]})
        assert len(samples) == 2

    def test_outside_boundary_is_ignored(self, internal_config):
        boundary = Boundary.from_bounds(85.29, 27.69, 85.315, 27.73)
        context = AnomalyProcessor(internal_config).run(scenario_provider(), boundary)
        assert context.sample_at_point((float(LON[3]), float(LAT[1]))) == []

    def test_invalid_coordinate_raises(self, context):
        with pytest.raises(InvalidCoordinate):
            context.sample_at_point((0.0, 95.0))

    def test_first_image_guard(self, make_config, full_boundary):
        """A gap in the first input image hides the whole point."""
        first = np.full((3, 4), 10.0)
        first[1, 1] = np.nan
        images = make_series([first, 20.0, 30.0], ["2001-01-01", "2002-01-01", "2007-01-01"])

        guarded = AnomalyProcessor(make_config()).run(FakeProvider(images), full_boundary)
        assert guarded.sample_at_point(CENTRE) == []

    def test_first_image_guard_disabled(self, make_config, full_boundary):
        first = np.full((3, 4), 10.0)
        first[1, 1] = np.nan
        images = make_series([first, 20.0, 30.0], ["2001-01-01", "2002-01-01", "2007-01-01"])
        config = make_config(sampler={"require_valid_first": False})

        context = AnomalyProcessor(config).run(FakeProvider(images), full_boundary)
        assert context.sample_at_point(CENTRE) == [(pd.Timestamp("2007-01-01"), 10.0)]


class TestSampleToFrame:
    """Test DataFrame export of a point series."""

    def test_columns_and_values(self, context):
        df = context.sample_to_frame(CENTRE)
        assert list(df.columns) == ["time", "cumulative_anomaly"]
        assert df["cumulative_anomaly"].tolist() == [5.0, 0.0]
        assert pd.api.types.is_datetime64_any_dtype(df["time"])

    def test_empty_frame_keeps_columns(self, context):
        df = context.sample_to_frame((0.0, 0.0))
        assert df.empty
        assert list(df.columns) == ["time", "cumulative_anomaly"]
