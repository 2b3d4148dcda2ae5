"""
Utility modules for dtnroute.

This package provides common utilities used across the dtnroute codebase.
Import directly from specific modules to avoid circular dependencies.

Example:
    from dtnroute.utils.logging_config import get_logger
    from dtnroute.utils.random import make_rng
"""

from dtnroute.utils.logging_config import get_logger, setup_logger

__all__ = [
    "setup_logger",
    "get_logger",
]
