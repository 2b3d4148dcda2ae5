"""
Delivery receipt cache.

Receipts are keyed by message identifier and never overwritten: the first
receipt stored for an identifier wins, whether it was created locally or
learned from a peer.
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from dtnroute.domain.receipt import Receipt


class ReceiptCache:
    """Set of known delivery receipts held by one node."""

    def __init__(self) -> None:
        self._receipts: dict[str, Receipt] = {}

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._receipts

    def __len__(self) -> int:
        return len(self._receipts)

    def __iter__(self) -> Iterator[str]:
        return iter(self._receipts)

    def get(self, message_id: str) -> Receipt | None:
        return self._receipts.get(message_id)

    def add(self, message_id: str, receipt: Receipt) -> bool:
        """
        Store a receipt unless one already exists for the message.

        :param message_id: Identifier of the delivered message
        :type message_id: str
        :param receipt: Receipt to store
        :type receipt: Receipt
        :return: True if the receipt was inserted
        :rtype: bool
        """
        if message_id in self._receipts:
            return False
        self._receipts[message_id] = receipt
        return True

    def merge(self, other: Mapping[str, Receipt]) -> list[str]:
        """
        Copy every receipt of ``other`` that this cache lacks.

        :param other: Receipts offered by a peer
        :type other: Mapping[str, Receipt]
        :return: Identifiers learned from ``other``
        :rtype: list[str]
        """
        learned = []
        for message_id, receipt in other.items():
            if self.add(message_id, receipt):
                learned.append(message_id)
        return learned

    def snapshot(self) -> Mapping[str, Receipt]:
        """
        Read-only view offered to a peer.

        :return: Copy of the receipts that the peer cannot mutate
        :rtype: Mapping[str, Receipt]
        """
        return MappingProxyType(dict(self._receipts))

    def sweep_expired(self, now: float) -> list[str]:
        """
        Remove receipts whose TTL has elapsed.

        :param now: Current simulation time
        :type now: float
        :return: Identifiers of removed receipts
        :rtype: list[str]
        """
        expired = [
            message_id
            for message_id, receipt in self._receipts.items()
            if receipt.is_expired(now)
        ]
        for message_id in expired:
            del self._receipts[message_id]
        return expired
