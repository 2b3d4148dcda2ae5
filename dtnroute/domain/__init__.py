"""
Domain value types for dtnroute.

- transfer: TransferResult codes and LinkState
- receipt: Receipt, CongestionSample, CongestionTelemetry records
- config: Frozen router, congestion and learning configuration
"""

from dtnroute.domain.config import CongestionConfig, LearningConfig, RouterConfig
from dtnroute.domain.receipt import CongestionSample, CongestionTelemetry, Receipt
from dtnroute.domain.transfer import LinkState, TransferResult

__all__ = [
    "CongestionConfig",
    "CongestionSample",
    "CongestionTelemetry",
    "LearningConfig",
    "LinkState",
    "Receipt",
    "RouterConfig",
    "TransferResult",
]
