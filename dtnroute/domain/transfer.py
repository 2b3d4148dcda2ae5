"""
Transfer outcome codes and per-link admission states.

This module defines:
- TransferResult: Codes returned by a host link when a transfer is requested
- LinkState: Admission state of a single contact as seen by one router
"""

from __future__ import annotations

from enum import Enum, IntEnum


class TransferResult(IntEnum):
    """
    Outcome of asking a link to start sending a message.

    Positive codes are transient and mean "try again on a later tick".
    Negative codes are refusals. The numeric values follow the receiving
    side's conventions used by the simulation host.
    """

    ACCEPTED = 0
    TRY_LATER_BUSY = 1
    DENIED_OLD = -1
    DENIED_NO_SPACE = -2
    DENIED_TTL = -3
    DENIED_LOW_RESOURCES = -4
    DENIED_POLICY = -5
    DENIED_UNSPECIFIED = -99

    @classmethod
    def from_code(cls, code: int) -> TransferResult:
        """
        Interpret a raw code returned by a host link.

        Unknown negative codes are refusals without a specific reason and
        unknown positive codes are treated as a busy link.

        :param code: Code returned by the link
        :type code: int
        :return: Matching transfer result
        :rtype: TransferResult
        """
        try:
            return cls(code)
        except ValueError:
            if code > 0:
                return cls.TRY_LATER_BUSY
            return cls.DENIED_UNSPECIFIED

    @property
    def is_accepted(self) -> bool:
        """Whether the transfer was started."""
        return self is TransferResult.ACCEPTED

    @property
    def is_transient(self) -> bool:
        """
        Whether the refusal resolves by itself on a later tick.

        :return: True for busy links and messages the peer already holds.
        :rtype: bool
        """
        return self in (TransferResult.TRY_LATER_BUSY, TransferResult.DENIED_OLD)

    @property
    def is_denied(self) -> bool:
        """Whether the code is a refusal (any negative value)."""
        return self.value < 0


class LinkState(Enum):
    """
    Admission state of one link from the point of view of one router.

    State Machine::

        DOWN --link up--> UP_ADMITTING --permits reach 0--> UP_EXHAUSTED
          ^                     |                                |
          +------link down------+-------------link down----------+
    """

    DOWN = "down"
    UP_ADMITTING = "up_admitting"
    UP_EXHAUSTED = "up_exhausted"

    @property
    def is_up(self) -> bool:
        """Whether the link is currently in contact."""
        return self is not LinkState.DOWN
