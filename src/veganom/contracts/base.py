"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
"""

from veganom.contracts.failure import ContractViolation


def require(condition: bool, message: str, error: type = ContractViolation) -> None:
    """Enforce a pipeline contract.

    Called at stage boundaries to verify the preceding stage produced the
    guaranteed invariants. It is fail-fast: no recovery, no fallback.

    Parameters
    ----------
    condition : bool
        The invariant that must be true.

    message : str
        Error message explaining the violation.

    error : type, optional
        Exception class to raise. Defaults to ContractViolation; structural
        checks pass DomainMismatch or InvalidCoordinate.

    Raises
    ------
    ContractViolation
        (or the given subclass) if condition is False.

    Examples
    --------
    >>> require(len(series) > 0, "Cumulative contract: series is empty")
    >>> require(a.domain.matches(b.domain), "grids differ", DomainMismatch)
    """
    if not condition:
        raise error(message)
