"""
Abstract base class for DTN routing policies in dtnroute.
"""

from abc import ABC, abstractmethod
from collections.abc import Hashable
from typing import Any

from dtnroute.domain.config import RouterConfig
from dtnroute.domain.transfer import TransferResult
from dtnroute.interfaces.host import (
    ClockLike,
    ContactPeer,
    LinkLike,
    MessageBufferLike,
)
from dtnroute.utils.logging_config import LoggerAdapter, get_logger
from dtnroute.utils.random import make_rng

logger = get_logger(__name__)


class AbstractDTNRouter(ABC):
    """
    Base class for all routing policies of a single DTN node.

    Subclasses decide admission control (``start_transfer``), buffer
    eviction (``make_room_for``) and what happens at link transitions. The
    scheduling tick in ``update`` is generic: deliver directly to final
    recipients first, then flood every buffered message over every ready
    link until one transfer starts.

    All callbacks are invoked one at a time by the host's event scheduler
    and run to completion.
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
        Initialize the router.

        :param node_id: Identity of the node owning this router
        :type node_id: Hashable
        :param buffer: Host message buffer of the node
        :type buffer: MessageBufferLike
        :param clock: Host simulation clock
        :type clock: ClockLike
        :param config: Router configuration, defaults when None
        :type config: RouterConfig | None
        :param seed: Seed of the generator used by the random send queue
        :type seed: int | None
        :param node_logger: Node logger, e.g. from ``configure_node_logging``;
            a node-tagged module logger when None
        :type node_logger: LoggerAdapter | None
        """
        self.node_id = node_id
        self.buffer = buffer
        self.clock = clock
        self.config = config if config is not None else RouterConfig()
        self._rng = make_rng(seed)
        self._links: list[LinkLike] = []
        self._sending_links: list[LinkLike] = []
        if node_logger is None:
            node_logger = LoggerAdapter(logger, {"node": node_id})
        self.logger = node_logger

    @property
    @abstractmethod
    def algorithm_name(self) -> str:
        """
        Return the name of the routing policy.

        :return: String identifier for this routing policy
        :rtype: str
        """

    @abstractmethod
    def start_transfer(self, message: Any, link: LinkLike) -> TransferResult:
        """
        Try to start sending a message over a link.

        :param message: Buffered message to send
        :type message: Any
        :param link: Link to send it over
        :type link: LinkLike
        :return: Outcome of the attempt
        :rtype: TransferResult
        """

    @abstractmethod
    def make_room_for(self, size: int) -> bool:
        """
        Free buffer space for an incoming message.

        :param size: Bytes needed
        :type size: int
        :return: True if ``size`` bytes are now free
        :rtype: bool
        """

    @abstractmethod
    def on_link_up(self, link: LinkLike, peer: ContactPeer | None) -> None:
        """
        Handle a link coming up.

        :param link: The new link
        :type link: LinkLike
        :param peer: The remote router, None when it cannot be reached
        :type peer: ContactPeer | None
        """

    @abstractmethod
    def on_link_down(self, link: LinkLike, peer: ContactPeer | None) -> None:
        """
        Handle a link going down.

        :param link: The link that went down
        :type link: LinkLike
        :param peer: The remote router, None when it cannot be reached
        :type peer: ContactPeer | None
        """

    @abstractmethod
    def message_fully_received(self, message: Any, from_node: Hashable) -> Any:
        """
        Handle a message that finished arriving at this node.

        :param message: The received message
        :type message: Any
        :param from_node: Identity of the sending node
        :type from_node: Hashable
        :return: The received message
        :rtype: Any
        """

    # ------------------------------------------------------------------
    # Link bookkeeping
    # ------------------------------------------------------------------
    @property
    def active_links(self) -> list[LinkLike]:
        """Links currently in contact, in the order they came up."""
        return list(self._links)

    def _register_link(self, link: LinkLike) -> None:
        if link not in self._links:
            self._links.append(link)

    def _unregister_link(self, link: LinkLike) -> None:
        if link in self._links:
            self._links.remove(link)
        if link in self._sending_links:
            self._sending_links.remove(link)

    def add_sending_link(self, link: LinkLike) -> None:
        """Record that this node started a transfer over ``link``."""
        if link not in self._sending_links:
            self._sending_links.append(link)

    def _prune_finished_transfers(self) -> None:
        self._sending_links = [
            link for link in self._sending_links if link.current_message() is not None
        ]

    def ready_links(self) -> list[LinkLike]:
        """Active links able to start a transfer now."""
        return [link for link in self._links if link.is_ready_for_transfer()]

    # ------------------------------------------------------------------
    # Buffer helpers
    # ------------------------------------------------------------------
    def is_transferring(self) -> bool:
        """
        Whether any transfer involving this node is in progress.

        True while this node is sending, and also while any active link is
        busy, which covers transfers a peer is pushing to this node.

        :return: Whether a transfer is in progress
        :rtype: bool
        """
        self._prune_finished_transfers()
        if self._sending_links:
            return True
        return any(not link.is_ready_for_transfer() for link in self._links)

    def can_start_transfer(self) -> bool:
        """Whether there is anything to send and a ready link to send it on."""
        if not any(True for _ in self.buffer.messages()):
            return False
        return bool(self.ready_links())

    def is_sending(self, message_id: str) -> bool:
        """Whether a message is currently being transferred out by this node."""
        for link in self._sending_links:
            current = link.current_message()
            if current is not None and current.id == message_id:
                return True
        return False

    def is_final_destination(self, message: Any) -> bool:
        """Whether this node is the message's final recipient."""
        return bool(message.destination == self.node_id)

    def delete_message(self, message_id: str, drop: bool) -> None:
        """
        Delete a buffered message, aborting any outbound transfer of it.

        Only links this node is sending the message on are aborted; a peer
        pushing a copy of the same message to this node keeps its transfer.

        :param message_id: Identifier of the message
        :type message_id: str
        :param drop: Report the deletion to the host as a drop
        :type drop: bool
        """
        for link in list(self._sending_links):
            current = link.current_message()
            if current is not None and current.id == message_id:
                link.abort_transfer()
                self._sending_links.remove(link)
                self.logger.debug("Aborted transfer of %s", message_id)
        self.buffer.delete(message_id, drop)

    def sorted_messages(self) -> list[Any]:
        """
        Buffered messages in send-queue order.

        ``fifo`` orders by receive time (oldest first); ``random`` shuffles
        with the router's generator.

        :return: Messages in the order they should be offered
        :rtype: list[Any]
        """
        messages = list(self.buffer.messages())
        if self.config.send_queue_mode == "random":
            order = self._rng.permutation(len(messages))
            return [messages[index] for index in order]
        return sorted(messages, key=lambda message: message.receive_time)

    # ------------------------------------------------------------------
    # Scheduling tick
    # ------------------------------------------------------------------
    def update(self) -> Any | None:
        """
        Run one scheduling tick.

        :return: The message whose transfer started, or None
        :rtype: Any | None
        """
        if self.is_transferring() or not self.can_start_transfer():
            return None

        started = self.exchange_deliverable_messages()
        if started is not None:
            return started

        return self.try_all_messages_to_all_links()

    def exchange_deliverable_messages(self) -> Any | None:
        """
        Offer messages to links whose peer is their final recipient.

        :return: The message whose transfer started, or None
        :rtype: Any | None
        """
        messages = self.sorted_messages()
        for link in self.ready_links():
            peer = link.other_node(self.node_id)
            deliverable = [message for message in messages if message.destination == peer]
            started = self._try_messages(link, deliverable)
            if started is not None:
                return started
        return None

    def try_all_messages_to_all_links(self) -> Any | None:
        """
        Offer every buffered message to every ready link.

        :return: The message whose transfer started, or None
        :rtype: Any | None
        """
        messages = self.sorted_messages()
        for link in self.ready_links():
            started = self._try_messages(link, messages)
            if started is not None:
                return started
        return None

    def _try_messages(self, link: LinkLike, messages: list[Any]) -> Any | None:
        for message in messages:
            # Earlier attempts may have purged this message from the buffer
            if self.buffer.get(message.id) is None:
                continue
            result = self.start_transfer(message, link)
            if result.is_accepted:
                return message
            if result.value > 0:
                # Busy link, move on to the next one
                return None
        return None
