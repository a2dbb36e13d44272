"""Anomaly stages.

- baseline: reference-period mean raster
- mapper: per-image anomaly and total anomaly
- cumulative: sequential cumulative anomaly fold
- sampler: point time series for charting
"""

from veganom.anomaly.baseline import build_baseline
from veganom.anomaly.mapper import map_anomalies, total_anomaly
from veganom.anomaly.cumulative import accumulate
from veganom.anomaly.sampler import sample_at_point, has_valid_data

__all__ = [
    "build_baseline",
    "map_anomalies",
    "total_anomaly",
    "accumulate",
    "sample_at_point",
    "has_valid_data",
]
