"""Centralized failure types for the anomaly pipeline.

Two families of errors leave the pipeline:

- ContractViolation and its structural subclasses (DomainMismatch,
  InvalidCoordinate). These are fatal: a caller bug or an inconsistent
  data source. They propagate immediately.
- DataSparsityError and its subclasses (DataUnavailable, EmptyRange,
  InsufficientBaselineData, EmptyInput). These are distinguished results:
  the data simply is not there, and the caller decides whether to widen a
  window or report "no data".
"""


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates a bug in pipeline logic or inconsistent input, not a
    sparse-data condition. It means a stage did not receive or produce the
    invariants it promised.

    Key distinction:
    - ValueError: User/config error (handled by Pydantic)
    - ContractViolation: Pipeline bug (programmer error)
    - DataSparsityError: No data where data was requested (caller decides)
    """
    pass


class DomainMismatch(ContractViolation):
    """Raised when two rasters combined pixel-wise do not share a grid."""
    pass


class InvalidCoordinate(ContractViolation):
    """Raised for a malformed point-sample request."""
    pass


class DataSparsityError(LookupError):
    """Base for 'no data in this window' outcomes."""
    pass


class DataUnavailable(DataSparsityError):
    """Provider yielded no images (or not the requested band)."""
    pass


class EmptyRange(DataSparsityError):
    """A date filter matched zero images."""
    pass


class InsufficientBaselineData(DataSparsityError):
    """The baseline reference window matched zero images."""
    pass


class EmptyInput(DataSparsityError):
    """Nothing to accumulate or sum."""
    pass


class SamplingCancelled(RuntimeError):
    """A point-sample request was superseded before it finished."""
    pass
