"""Pipeline contracts and failure types.

This package enforces semantic guarantees between pipeline stages.
Contracts fail immediately and loudly when a stage does not produce its
promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- DataSparsityError reports missing data to the caller
"""

from veganom.contracts.failure import (
    ContractViolation,
    DomainMismatch,
    InvalidCoordinate,
    DataSparsityError,
    DataUnavailable,
    EmptyRange,
    InsufficientBaselineData,
    EmptyInput,
    SamplingCancelled,
)
from veganom.contracts.base import require
from veganom.contracts.series import (
    assert_raster_series,
    assert_same_domain,
    assert_baseline,
    assert_anomalies,
    assert_cumulative,
)

__all__ = [
    "ContractViolation",
    "DomainMismatch",
    "InvalidCoordinate",
    "DataSparsityError",
    "DataUnavailable",
    "EmptyRange",
    "InsufficientBaselineData",
    "EmptyInput",
    "SamplingCancelled",
    "require",
    "assert_raster_series",
    "assert_same_domain",
    "assert_baseline",
    "assert_anomalies",
    "assert_cumulative",
]
