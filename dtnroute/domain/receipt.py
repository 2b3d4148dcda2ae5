"""
Small value records exchanged or reported by routers.

- Receipt: proof that a message reached its final destination
- CongestionSample: one point of a node's congestion value history
- CongestionTelemetry: drop/replication counters handed to a peer at contact end
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Receipt:
    """
    Delivery receipt for one message.

    Created by the destination node when the message is fully received and
    copied, never overwritten, between nodes at every contact.

    Attributes:
        creation_time: Simulation time the destination created the receipt
        ttl: Time-to-live copied from the delivered message, in clock units
    """

    creation_time: float
    ttl: float

    @property
    def expires_at(self) -> float:
        """Simulation time after which the receipt is stale."""
        return self.creation_time + self.ttl

    def is_expired(self, now: float) -> bool:
        """
        Check whether the receipt has outlived its message.

        :param now: Current simulation time.
        :type now: float
        :return: True once ``now`` reaches ``creation_time + ttl``.
        :rtype: bool
        """
        return now >= self.expires_at


@dataclass(frozen=True)
class CongestionSample:
    """A congestion value together with the time it was recorded."""

    cv: float
    time: float

    def __iter__(self):  # type: ignore[no-untyped-def]
        return iter((self.cv, self.time))

    def to_dict(self) -> dict[str, float]:
        return {"cv": self.cv, "time": self.time}


@dataclass(frozen=True)
class CongestionTelemetry:
    """
    Congestion counters a node reports to its peer when a contact ends.

    Attributes:
        drops: Messages evicted from the buffer since the last reset
        replications: Messages fully received since the last reset
    """

    drops: int = 0
    replications: int = 0

    def __post_init__(self) -> None:
        if self.drops < 0 or self.replications < 0:
            raise ValueError("Telemetry counters must be non-negative")
