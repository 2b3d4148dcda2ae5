"""
Custom exceptions for the routing module.

Transient and policy rejections are reported as TransferResult codes and
capacity exhaustion as a False return value; the exceptions below are only
raised for programmer errors and corrupted router state.
"""


class RoutingError(Exception):
    """Base exception for all routing module errors."""


class CongestionStateError(RoutingError):
    """
    Raised when the congestion estimator reaches an impossible state.

    For example a transfer limit that would become negative.
    """


class RouterNotFoundError(RoutingError, KeyError):
    """Raised when a requested router is not present in the registry."""
