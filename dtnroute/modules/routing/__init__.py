"""
Routing module for dtnroute.

Provides the congestion-aware epidemic router and its building blocks.

Key Components:
- epidemic: EpidemicRouter with receipts, per-link quotas and drop-oldest eviction
- congestion: CongestionEstimator implementing the AIMD limit control
- receipts: ReceiptCache with first-writer-wins merging
- registry: RouterRegistry mapping names to router classes
"""

from .congestion import CongestionEstimator, drop_ratio, extra_replications_from_buffer
from .epidemic import EpidemicRouter
from .receipts import ReceiptCache
from .registry import (
    RouterRegistry,
    create_router,
    create_router_from_config,
    get_router,
    list_routers,
)

__all__ = [
    "CongestionEstimator",
    "EpidemicRouter",
    "ReceiptCache",
    "RouterRegistry",
    "create_router",
    "create_router_from_config",
    "drop_ratio",
    "extra_replications_from_buffer",
    "get_router",
    "list_routers",
]
