"""
Congestion-aware epidemic router with delivery receipts.

Messages are flooded to every contact, but each link only admits as many
transfers as the node's current AIMD limit allows. Delivery receipts are
exchanged at every link-up so that copies of delivered messages are purged
network-wide, and the buffer evicts the oldest idle message when full.
"""

from collections.abc import Hashable, Mapping
from typing import Any

from dtnroute.domain.config import RouterConfig
from dtnroute.domain.receipt import (
    CongestionSample,
    CongestionTelemetry,
    Receipt,
)
from dtnroute.domain.transfer import LinkState, TransferResult
from dtnroute.interfaces.host import (
    ClockLike,
    ContactPeer,
    LinkLike,
    MessageBufferLike,
)
from dtnroute.interfaces.router import AbstractDTNRouter
from dtnroute.modules.routing.congestion import (
    CongestionEstimator,
    extra_replications_from_buffer,
)
from dtnroute.modules.routing.receipts import ReceiptCache
from dtnroute.utils.logging_config import LoggerAdapter, get_logger

logger = get_logger(__name__)


class EpidemicRouter(AbstractDTNRouter):
    """
    Epidemic router with receipt-based garbage collection, per-link transfer
    quotas driven by congestion feedback, and drop-oldest buffer eviction.
    """

    def __init__(
        self,
        node_id: Hashable,
        buffer: MessageBufferLike,
        clock: ClockLike,
        config: RouterConfig | None = None,
        seed: int | None = None,
        node_logger: LoggerAdapter | None = None,
    ) -> None:
        """
        Initialize the epidemic router.

        :param node_id: Identity of the node owning this router
        :type node_id: Hashable
        :param buffer: Host message buffer of the node
        :type buffer: MessageBufferLike
        :param clock: Host simulation clock
        :type clock: ClockLike
        :param config: Router configuration, defaults when None
        :type config: RouterConfig | None
        :param seed: Seed of the random send queue generator
        :type seed: int | None
        :param node_logger: Node logger, e.g. from ``configure_node_logging``;
            a node-tagged module logger when None
        :type node_logger: LoggerAdapter | None
        """
        if node_logger is None:
            node_logger = LoggerAdapter(logger, {"node": node_id})
        super().__init__(
            node_id, buffer, clock, config=config, seed=seed, node_logger=node_logger
        )
        self.congestion = CongestionEstimator(self.config.congestion)
        self.receipts = ReceiptCache()
        self._link_quota: dict[LinkLike, int] = {}
        self._pending_deletions: set[str] = set()

    @property
    def algorithm_name(self) -> str:
        """
        Get the name of the routing policy.

        :return: The policy name 'epidemic_rr'.
        :rtype: str
        """
        return "epidemic_rr"

    @property
    def cv(self) -> float:
        """Current smoothed congestion value."""
        return self.congestion.cv

    @property
    def limit(self) -> int:
        """Permits granted to the next link that comes up."""
        return self.congestion.limit

    @property
    def congestion_history(self) -> list[CongestionSample]:
        return self.congestion.history

    def quota_for(self, link: LinkLike) -> int | None:
        """
        Remaining transfer permits of a link.

        :param link: The link to query
        :type link: LinkLike
        :return: Remaining permits, None if the link has no quota entry
        :rtype: int | None
        """
        return self._link_quota.get(link)

    def link_state(self, link: LinkLike) -> LinkState:
        """
        Admission state of a link.

        :param link: The link to query
        :type link: LinkLike
        :return: DOWN when not in contact, UP_ADMITTING while permits remain,
            UP_EXHAUSTED otherwise
        :rtype: LinkState
        """
        if link not in self._links:
            return LinkState.DOWN
        if self._link_quota.get(link, 0) > 0:
            return LinkState.UP_ADMITTING
        return LinkState.UP_EXHAUSTED

    # ------------------------------------------------------------------
    # Contact exchange
    # ------------------------------------------------------------------
    def receipt_snapshot(self) -> Mapping[str, Receipt]:
        """Receipts offered to a peer at link-up."""
        return self.receipts.snapshot()

    def congestion_telemetry(self) -> CongestionTelemetry:
        """Live drop and replication counters reported to a peer at link-down."""
        return self.congestion.telemetry()

    # ------------------------------------------------------------------
    # Host callbacks
    # ------------------------------------------------------------------
    def on_link_up(self, link: LinkLike, peer: ContactPeer | None) -> None:
        """
        Grant the link its permits, exchange receipts and purge delivered copies.

        :param link: The new link
        :type link: LinkLike
        :param peer: The remote router, None when it cannot be reached
        :type peer: ContactPeer | None
        """
        self._register_link(link)
        self._link_quota[link] = self.congestion.limit

        if self.config.receipt_expiry:
            expired = self.receipts.sweep_expired(self.clock.now())
            if expired:
                self.logger.debug("Swept %d expired receipts", len(expired))

        if peer is not None:
            learned = self.receipts.merge(peer.receipt_snapshot())
            if learned:
                self.logger.debug("Learned %d receipts from peer", len(learned))

        for message in self.buffer.messages():
            if message.id in self.receipts:
                self._pending_deletions.add(message.id)

        for message_id in sorted(self._pending_deletions):
            self.delete_message(message_id, drop=False)
        if self._pending_deletions:
            self.logger.debug(
                "Purged %d delivered messages", len(self._pending_deletions)
            )
        self._pending_deletions.clear()

        self.logger.debug("Link up, %d permits granted", self._link_quota[link])

    def on_link_down(self, link: LinkLike, peer: ContactPeer | None) -> None:
        """
        Update congestion state from this contact and forget the link.

        :param link: The link that went down
        :type link: LinkLike
        :param peer: The remote router, None when it cannot be reached
        :type peer: ContactPeer | None
        """
        if peer is not None:
            telemetry: CongestionTelemetry | None = peer.congestion_telemetry()
        else:
            telemetry = None
            self.logger.warning(
                "Peer unreachable at contact end, using local counters only"
            )

        extra = extra_replications_from_buffer(self.buffer.messages())
        self.congestion.update(telemetry, extra, self.clock.now())

        self._link_quota.pop(link, None)
        self._unregister_link(link)
        self._pending_deletions.clear()

        self.logger.debug(
            "Link down, cv=%.4f next limit=%d", self.congestion.cv, self.congestion.limit
        )

    def start_transfer(self, message: Any, link: LinkLike) -> TransferResult:
        """
        Start a transfer if the link is ready and still has permits.

        :param message: Buffered message to send
        :type message: Any
        :param link: Link to send it over
        :type link: LinkLike
        :return: TRY_LATER_BUSY for a busy link, DENIED_UNSPECIFIED without
            permits, otherwise the code returned by the link
        :rtype: TransferResult
        """
        if not link.is_ready_for_transfer():
            return TransferResult.TRY_LATER_BUSY

        permits = self._link_quota.get(link)
        if permits is None or permits <= 0:
            return TransferResult.DENIED_UNSPECIFIED

        code = link.start_transfer(self.node_id, message)
        result = TransferResult.from_code(code)
        if result.is_accepted:
            self.add_sending_link(link)
            remaining = permits - 1
            if remaining > 0:
                self._link_quota[link] = remaining
            else:
                del self._link_quota[link]
                self.logger.debug("Link quota exhausted")
        elif (
            result is TransferResult.DENIED_OLD
            and self.config.delete_delivered
            and message.destination == link.other_node(self.node_id)
        ):
            # Final recipient already has the message
            self.delete_message(message.id, drop=False)

        return result

    def make_room_for(self, size: int) -> bool:
        """
        Evict the oldest idle messages until ``size`` bytes are free.

        Messages being transferred out are never evicted. Every eviction is
        counted as a drop.

        :param size: Bytes needed
        :type size: int
        :return: False if ``size`` exceeds the buffer capacity or not enough
            idle messages can be evicted
        :rtype: bool
        """
        if size > self.buffer.capacity():
            self.logger.info("Message of %d bytes exceeds buffer capacity", size)
            return False

        free_space = self.buffer.free_space()
        while free_space < size:
            message = self.buffer.oldest_message(exclude_sending=True)
            if message is None:
                self.logger.info("Cannot free %d bytes, no evictable message left", size)
                return False

            self.buffer.delete(message.id, True)
            self.congestion.record_drop()
            free_space += message.size
            self.logger.debug("Dropped %s to make room", message.id)

        return True

    def message_fully_received(self, message: Any, from_node: Hashable) -> Any:
        """
        Count a replication and issue a receipt when this node is the destination.

        :param message: The received message
        :type message: Any
        :param from_node: Identity of the sending node
        :type from_node: Hashable
        :return: The received message
        :rtype: Any
        """
        self.congestion.record_replication()

        if self.is_final_destination(message):
            receipt = Receipt(creation_time=self.clock.now(), ttl=message.ttl)
            if self.receipts.add(message.id, receipt):
                self.logger.debug("Delivered %s from %s", message.id, from_node)

        return message
