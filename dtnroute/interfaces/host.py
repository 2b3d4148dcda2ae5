"""
Host protocols consumed by dtnroute routers.

The simulation host owns topology, contact scheduling, connections, message
buffers and the clock. Routers only see these structural protocols, so any
host object with the required attributes and methods can be plugged in
without explicit inheritance.

Example:
    >>> class Clock:
    ...     def __init__(self) -> None:
    ...         self.time = 0.0
    ...     def now(self) -> float:
    ...         return self.time
    >>>
    >>> isinstance(Clock(), ClockLike)  # True
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from dtnroute.domain.receipt import CongestionTelemetry, Receipt
    from dtnroute.domain.transfer import TransferResult


@runtime_checkable
class MessageLike(Protocol):
    """
    Read-only view of a host message.

    Attributes:
        id: Unique message identifier
        destination: Identity of the final recipient node
        size: Size in bytes
        hop_count: Number of hops travelled so far
        ttl: Remaining time-to-live, in clock units
        receive_time: Time the message entered the current node's buffer
    """

    id: str
    destination: Hashable
    size: int
    hop_count: int
    ttl: float
    receive_time: float


@runtime_checkable
class LinkLike(Protocol):
    """A connection between two nodes that is currently in contact."""

    def is_ready_for_transfer(self) -> bool:
        """Whether the link can start a new transfer right now."""
        ...

    def start_transfer(self, sender: Hashable, message: Any) -> TransferResult:
        """Ask the receiving side to accept ``message`` from ``sender``."""
        ...

    def abort_transfer(self) -> None:
        """Abort the transfer in progress, if any."""
        ...

    def current_message(self) -> Any | None:
        """The message being transferred over the link, or None."""
        ...

    def other_node(self, node: Hashable) -> Hashable:
        """Identity of the endpoint that is not ``node``."""
        ...


@runtime_checkable
class MessageBufferLike(Protocol):
    """The host-side message buffer of one node."""

    def capacity(self) -> int:
        """Total buffer size in bytes."""
        ...

    def free_space(self) -> int:
        """Unoccupied buffer space in bytes."""
        ...

    def messages(self) -> Iterable[Any]:
        """Every buffered message."""
        ...

    def get(self, message_id: str) -> Any | None:
        """The buffered message with this identifier, or None."""
        ...

    def oldest_message(self, exclude_sending: bool) -> Any | None:
        """
        The message with the earliest receive time.

        With ``exclude_sending`` messages currently being transferred out are
        never returned.
        """
        ...

    def delete(self, message_id: str, drop: bool) -> None:
        """Remove a message, reporting it as a drop when ``drop`` is True."""
        ...


@runtime_checkable
class ClockLike(Protocol):
    """Monotonic simulation clock advanced by the host."""

    def now(self) -> float:
        ...


@runtime_checkable
class ContactPeer(Protocol):
    """
    The remote endpoint of a contact as seen during link transitions.

    Both calls model one message of the per-contact exchange: the receipt
    set offered at link-up and the congestion counters reported at link-down.
    """

    def receipt_snapshot(self) -> Mapping[str, Receipt]:
        ...

    def congestion_telemetry(self) -> CongestionTelemetry:
        ...
