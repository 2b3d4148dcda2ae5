"""
Congestion estimation and AIMD transfer-quota control.

At the end of every contact a node combines its own and its peer's drop and
replication counters into a drop ratio, folds it into an exponentially
smoothed congestion value (CV), and adjusts the per-link transfer limit:
additive increase while the CV does not grow, multiplicative decrease
otherwise.
"""

import math
from collections.abc import Iterable
from typing import Any

from dtnroute.domain.config import CongestionConfig
from dtnroute.domain.receipt import CongestionSample, CongestionTelemetry
from dtnroute.modules.routing.errors import CongestionStateError
from dtnroute.utils.logging_config import get_logger

logger = get_logger(__name__)


def extra_replications_from_buffer(messages: Iterable[Any]) -> int:
    """
    Replications implied by the hop counts of buffered messages.

    A message that travelled ``h > 0`` hops was copied at least ``h - 1``
    times before reaching this node. Messages with zero hops were never
    relayed and contribute nothing.

    :param messages: Messages currently in the buffer
    :type messages: Iterable[Any]
    :return: Sum of ``hop_count - 1`` over relayed messages
    :rtype: int
    """
    total_hops = 0
    for message in messages:
        if message.hop_count > 0:
            total_hops += message.hop_count - 1
    return total_hops


def drop_ratio(drops: int, replications: int) -> float:
    """
    Share of drops among drops and replications seen in one contact.

    :param drops: Drops counted by both endpoints
    :type drops: int
    :param replications: Replications counted by both endpoints plus the buffer term
    :type replications: int
    :return: ``drops / replications``, or 1.0 when nothing was replicated
    :rtype: float

    Note:
        The zero-denominator case is treated as maximally congested.
    """
    if replications == 0:
        return 1.0
    return drops / replications


class CongestionEstimator:
    """Smoothed congestion value and AIMD limit of one node."""

    def __init__(self, config: CongestionConfig | None = None) -> None:
        """
        Initialize the estimator.

        :param config: AIMD parameters, defaults when None
        :type config: CongestionConfig | None
        """
        self.config = config if config is not None else CongestionConfig()
        self._cv = float(self.config.initial_cv)
        self._limit = int(self.config.initial_limit)
        self._drops = 0
        self._replications = 0
        self._history: list[CongestionSample] = []

    @property
    def cv(self) -> float:
        return self._cv

    @property
    def limit(self) -> int:
        """Transfer permits granted to every link that comes up from now on."""
        return self._limit

    @property
    def drops(self) -> int:
        return self._drops

    @property
    def replications(self) -> int:
        return self._replications

    @property
    def history(self) -> list[CongestionSample]:
        """Pre-update CV recorded at every contact end, oldest first."""
        return self._history

    def record_drop(self) -> None:
        self._drops += 1

    def record_replication(self) -> None:
        self._replications += 1

    def telemetry(self) -> CongestionTelemetry:
        """
        Current counters as reported to a peer.

        Reading the counters does not reset them.

        :return: Live drop and replication counts
        :rtype: CongestionTelemetry
        """
        return CongestionTelemetry(drops=self._drops, replications=self._replications)

    def update(
        self,
        peer: CongestionTelemetry | None,
        extra_replications: int,
        now: float,
    ) -> float:
        """
        Consume the counters of one contact and adapt the limit.

        :param peer: Counters reported by the peer, None if it could not be
            reached (it then contributes nothing)
        :type peer: CongestionTelemetry | None
        :param extra_replications: Replication term derived from the buffer
        :type extra_replications: int
        :param now: Current simulation time
        :type now: float
        :return: The new congestion value
        :rtype: float
        :raises CongestionStateError: If the limit would become negative
        """
        peer = peer if peer is not None else CongestionTelemetry()
        replications = self._replications + peer.replications + extra_replications
        drops = self._drops + peer.drops
        self._drops = 0
        self._replications = 0

        ratio = drop_ratio(drops, replications)
        alpha = self.config.alpha
        new_cv = alpha * ratio + (1.0 - alpha) * self._cv

        self._history.append(CongestionSample(cv=self._cv, time=now))

        previous_limit = self._limit
        if new_cv <= self._cv:
            self._limit = self._limit + self.config.additive_increase
        else:
            self._limit = math.ceil(self._limit * self.config.multiplicative_decrease)

        if self._limit < 0:
            raise CongestionStateError(f"Transfer limit became negative: {self._limit}")

        logger.debug(
            "Contact end at %.3f: drops=%d reps=%d ratio=%.4f cv %.4f -> %.4f, "
            "limit %d -> %d",
            now,
            drops,
            replications,
            ratio,
            self._cv,
            new_cv,
            previous_limit,
            self._limit,
        )
        self._cv = new_cv
        return new_cv
