"""Fake simulation host objects shared by the routing tests."""

from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any

import pytest

from dtnroute.domain.config import CongestionConfig, RouterConfig
from dtnroute.domain.transfer import TransferResult
from dtnroute.modules.routing.epidemic import EpidemicRouter


@dataclass
class FakeMessage:
    """Buffered message with the attributes routers read."""

    id: str
    destination: Hashable
    size: int = 10
    hop_count: int = 0
    ttl: float = 100.0
    receive_time: float = 0.0


class FakeClock:
    """Manually advanced simulation clock."""

    def __init__(self, time: float = 0.0) -> None:
        self.time = time

    def now(self) -> float:
        return self.time


class FakeBuffer:
    """In-memory message buffer recording every deletion."""

    def __init__(self, capacity: int = 100) -> None:
        self._capacity = capacity
        self._messages: dict[str, FakeMessage] = {}
        self.deleted: list[tuple[str, bool]] = []
        self.is_sending: Callable[[str], bool] = lambda _message_id: False

    def add(self, *messages: FakeMessage) -> None:
        for message in messages:
            self._messages[message.id] = message

    def capacity(self) -> int:
        return self._capacity

    def free_space(self) -> int:
        return self._capacity - sum(m.size for m in self._messages.values())

    def messages(self) -> list[FakeMessage]:
        return list(self._messages.values())

    def ids(self) -> set[str]:
        return set(self._messages)

    def get(self, message_id: str) -> FakeMessage | None:
        return self._messages.get(message_id)

    def oldest_message(self, exclude_sending: bool) -> FakeMessage | None:
        candidates = [
            m
            for m in self._messages.values()
            if not (exclude_sending and self.is_sending(m.id))
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda m: m.receive_time)

    def delete(self, message_id: str, drop: bool) -> None:
        del self._messages[message_id]
        self.deleted.append((message_id, drop))


class FakeLink:
    """
    Bidirectional link between two nodes.

    ``result`` is the code returned by the next ``start_transfer`` call. An
    accepted transfer occupies the link until ``finish`` or ``abort_transfer``.
    """

    def __init__(self, node_a: Hashable, node_b: Hashable) -> None:
        self.nodes = (node_a, node_b)
        self.result = TransferResult.ACCEPTED
        self.ready = True
        self.started: list[tuple[Hashable, Any]] = []
        self.aborted = 0
        self._current: Any | None = None

    def is_ready_for_transfer(self) -> bool:
        return self.ready and self._current is None

    def start_transfer(self, sender: Hashable, message: Any) -> TransferResult:
        self.started.append((sender, message))
        if self.result is TransferResult.ACCEPTED:
            self._current = message
        return self.result

    def abort_transfer(self) -> None:
        self.aborted += 1
        self._current = None

    def current_message(self) -> Any | None:
        return self._current

    def other_node(self, node: Hashable) -> Hashable:
        return self.nodes[1] if node == self.nodes[0] else self.nodes[0]

    def finish(self) -> Any | None:
        message, self._current = self._current, None
        return message


def make_router(
    node_id: Hashable,
    clock: FakeClock,
    capacity: int = 100,
    config: RouterConfig | None = None,
    seed: int | None = None,
) -> EpidemicRouter:
    """Build a router over a fresh fake buffer wired to its sending state."""
    buffer = FakeBuffer(capacity)
    router = EpidemicRouter(node_id, buffer, clock, config=config, seed=seed)
    buffer.is_sending = router.is_sending
    return router


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def router(clock: FakeClock) -> EpidemicRouter:
    return make_router("A", clock)


@pytest.fixture
def link() -> FakeLink:
    return FakeLink("A", "B")


@pytest.fixture
def quota_config() -> Callable[[int], RouterConfig]:
    """Return a factory of router configs with a given initial limit."""

    def _build(limit: int, **options: Any) -> RouterConfig:
        return RouterConfig(congestion=CongestionConfig(initial_limit=limit), **options)

    return _build
