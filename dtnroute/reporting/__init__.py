"""
Reporting module for dtnroute.

This module provides utilities for summarizing, exporting and plotting the
congestion histories collected by routers.
"""

from dtnroute.reporting.congestion_report import (
    export_cv_history_to_csv,
    plot_cv_history,
    summarize_cv_history,
)

__all__ = [
    "export_cv_history_to_csv",
    "plot_cv_history",
    "summarize_cv_history",
]
