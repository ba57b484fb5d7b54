"""Errors raised by the estimator core."""


class EstimatorError(Exception):
    """Base class for estimator errors."""


class PersistenceError(EstimatorError):
    """The persistence adapter could not read or write a snapshot."""
