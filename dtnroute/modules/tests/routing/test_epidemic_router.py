# pylint: disable=protected-access

"""Unit tests for dtnroute.modules.routing.epidemic module."""

import logging
from types import MappingProxyType
from unittest import mock

import pytest
from conftest import FakeClock, FakeLink, FakeMessage, make_router

from dtnroute.domain.config import RouterConfig
from dtnroute.domain.receipt import CongestionTelemetry, Receipt
from dtnroute.domain.transfer import LinkState, TransferResult
from dtnroute.interfaces.host import ContactPeer
from dtnroute.interfaces.router import AbstractDTNRouter
from dtnroute.modules.routing.epidemic import EpidemicRouter


def _peer(
    receipts: dict[str, Receipt] | None = None,
    telemetry: CongestionTelemetry | None = None,
) -> mock.MagicMock:
    peer = mock.MagicMock(spec=ContactPeer)
    peer.receipt_snapshot.return_value = MappingProxyType(receipts or {})
    peer.congestion_telemetry.return_value = telemetry or CongestionTelemetry()
    return peer


class TestRouterBasics:
    """Identity and contact-exchange surface."""

    def test_is_a_dtn_router(self, router: EpidemicRouter) -> None:
        """Router implements the routing policy interface."""
        assert isinstance(router, AbstractDTNRouter)
        assert router.algorithm_name == "epidemic_rr"

    def test_satisfies_contact_peer_protocol(self, router: EpidemicRouter) -> None:
        """Routers can be handed to each other as contact peers."""
        assert isinstance(router, ContactPeer)

    def test_initial_congestion_state(self, router: EpidemicRouter) -> None:
        """Fresh router starts from the configured defaults."""
        assert router.cv == 0.0
        assert router.limit == 1
        assert router.congestion_history == []
        assert len(router.receipts) == 0

    def test_receipt_snapshot_is_read_only(self, router: EpidemicRouter) -> None:
        """Peers cannot mutate the offered receipts."""
        router.receipts.add("m1", Receipt(0.0, 10.0))

        snapshot = router.receipt_snapshot()

        with pytest.raises(TypeError):
            snapshot["m2"] = Receipt(0.0, 1.0)  # type: ignore[index]


class TestLinkUp:
    """Quota grant, receipt exchange and purge at link-up."""

    def test_grants_current_limit(
        self, clock: FakeClock, link: FakeLink, quota_config
    ) -> None:
        """New link gets as many permits as the current limit."""
        router = make_router("A", clock, config=quota_config(3))

        assert router.link_state(link) is LinkState.DOWN
        router.on_link_up(link, _peer())

        assert router.quota_for(link) == 3
        assert router.link_state(link) is LinkState.UP_ADMITTING
        assert router.active_links == [link]

    def test_merges_peer_receipts(self, router: EpidemicRouter, link: FakeLink) -> None:
        """Peer receipts are learned without overwriting local ones."""
        local = Receipt(1.0, 10.0)
        router.receipts.add("m1", local)
        peer = _peer({"m1": Receipt(5.0, 99.0), "m2": Receipt(2.0, 20.0)})

        router.on_link_up(link, peer)

        assert set(router.receipts) == {"m1", "m2"}
        assert router.receipts.get("m1") is local

    def test_purges_messages_with_receipts(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """Delivered copies are deleted without counting as drops."""
        router.buffer.add(FakeMessage("m1", "C"), FakeMessage("m2", "C"))
        peer = _peer({"m2": Receipt(0.0, 10.0)})

        router.on_link_up(link, peer)

        assert router.buffer.ids() == {"m1"}
        assert router.buffer.deleted == [("m2", False)]
        assert router.congestion_telemetry().drops == 0
        assert router._pending_deletions == set()

    def test_purge_aborts_outbound_transfer(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """Transfer of a purged message is aborted on every carrying link."""
        message = FakeMessage("m1", "C")
        router.buffer.add(message)
        router.on_link_up(link, _peer())
        assert router.start_transfer(message, link) is TransferResult.ACCEPTED

        other = FakeLink("A", "D")
        router.on_link_up(other, _peer({"m1": Receipt(0.0, 10.0)}))

        assert link.aborted == 1
        assert link.current_message() is None
        assert router.buffer.ids() == set()

    def test_purge_keeps_inbound_transfer(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """A peer pushing a copy of a purged message is not interrupted."""
        router.buffer.add(FakeMessage("m1", "C"))
        router.on_link_up(link, _peer())
        link.start_transfer("B", FakeMessage("m1", "C"))

        router.on_link_up(FakeLink("A", "D"), _peer({"m1": Receipt(0.0, 10.0)}))

        assert link.aborted == 0
        assert link.current_message().id == "m1"
        assert router.buffer.deleted == [("m1", False)]

    def test_unreachable_peer_still_grants_quota(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """Failed handshake skips the exchange but not the local purge."""
        router.receipts.add("m1", Receipt(0.0, 10.0))
        router.buffer.add(FakeMessage("m1", "C"))

        router.on_link_up(link, None)

        assert router.quota_for(link) == 1
        assert router.buffer.ids() == set()

    def test_receipts_kept_by_default(
        self, router: EpidemicRouter, clock: FakeClock, link: FakeLink
    ) -> None:
        """Expired receipts stay unless expiry is enabled."""
        router.receipts.add("m1", Receipt(0.0, 5.0))
        clock.time = 50.0

        router.on_link_up(link, _peer())

        assert "m1" in router.receipts

    def test_expiry_sweeps_before_exchange(self, clock: FakeClock, link: FakeLink) -> None:
        """With expiry on, stale receipts are removed before merging."""
        router = make_router("A", clock, config=RouterConfig(receipt_expiry=True))
        router.receipts.add("old", Receipt(0.0, 5.0))
        router.receipts.add("fresh", Receipt(0.0, 100.0))
        clock.time = 5.0

        router.on_link_up(link, _peer({"stale_remote": Receipt(0.0, 1.0)}))

        # Receipts learned from the peer are merged after the sweep
        assert set(router.receipts) == {"fresh", "stale_remote"}


class TestLinkDown:
    """Congestion update and cleanup at link-down."""

    def test_forgets_link_and_quota(self, router: EpidemicRouter, link: FakeLink) -> None:
        """Link leaves the active set and loses its permits."""
        router.on_link_up(link, _peer())

        router.on_link_down(link, _peer())

        assert router.quota_for(link) is None
        assert router.link_state(link) is LinkState.DOWN
        assert router.active_links == []

    def test_records_history_and_adapts_limit(
        self, router: EpidemicRouter, clock: FakeClock, link: FakeLink
    ) -> None:
        """Zero drops with replications raise the limit by one."""
        router.on_link_up(link, _peer())
        clock.time = 12.0

        router.on_link_down(link, _peer(telemetry=CongestionTelemetry(0, 4)))

        assert router.cv == 0.0
        assert router.limit == 2
        assert [tuple(s) for s in router.congestion_history] == [(0.0, 12.0)]

    def test_combines_peer_and_buffer_counts(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """Ratio uses local, peer and buffer-derived replication counts."""
        router.buffer.add(FakeMessage("m1", "C", hop_count=3))
        router.congestion.record_drop()
        router.congestion.record_replication()
        router.on_link_up(link, _peer())

        router.on_link_down(link, _peer(telemetry=CongestionTelemetry(1, 1)))

        # drops 2, reps 1 + 1 + (3 - 1) = 4
        assert router.cv == pytest.approx(0.9 * 0.5)
        assert router.congestion_telemetry() == CongestionTelemetry(0, 0)

    def test_unreachable_peer_contributes_nothing(
        self, router: EpidemicRouter, link: FakeLink, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Missing peer is logged and treated as zero counts."""
        router.congestion.record_replication()
        router.on_link_up(link, None)

        with caplog.at_level(logging.WARNING, logger="dtnroute.modules.routing.epidemic"):
            router.on_link_down(link, None)

        assert router.cv == 0.0
        assert router.limit == 2
        assert "Peer unreachable" in caplog.text

    def test_reset_link_gets_new_limit(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """A link coming back up is granted the updated limit."""
        router.on_link_up(link, _peer())
        router.on_link_down(link, _peer(telemetry=CongestionTelemetry(0, 1)))

        router.on_link_up(link, _peer())

        assert router.quota_for(link) == 2


class TestStartTransfer:
    """Admission control over per-link permits."""

    def test_busy_link_is_transient(self, router: EpidemicRouter, link: FakeLink) -> None:
        """Busy link does not consume a permit."""
        router.on_link_up(link, _peer())
        link.ready = False

        result = router.start_transfer(FakeMessage("m1", "C"), link)

        assert result is TransferResult.TRY_LATER_BUSY
        assert router.quota_for(link) == 1
        assert link.started == []

    def test_link_without_quota_is_denied(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """A link that never came up has no permits."""
        result = router.start_transfer(FakeMessage("m1", "C"), link)

        assert result is TransferResult.DENIED_UNSPECIFIED
        assert link.started == []

    def test_quota_admits_exactly_limit_transfers(
        self, clock: FakeClock, link: FakeLink, quota_config
    ) -> None:
        """A link granted two permits accepts two starts, then denies."""
        router = make_router("A", clock, config=quota_config(2))
        router.on_link_up(link, _peer())
        results = []

        for index in range(3):
            message = FakeMessage(f"m{index}", "C")
            router.buffer.add(message)
            results.append(router.start_transfer(message, link))
            link.finish()

        assert results == [
            TransferResult.ACCEPTED,
            TransferResult.ACCEPTED,
            TransferResult.DENIED_UNSPECIFIED,
        ]
        assert router.quota_for(link) is None
        assert router.link_state(link) is LinkState.UP_EXHAUSTED

    def test_accepted_transfer_marks_sending(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """Accepted transfers are tracked as outbound."""
        message = FakeMessage("m1", "C")
        router.buffer.add(message)
        router.on_link_up(link, _peer())

        router.start_transfer(message, link)

        assert router.is_transferring()
        assert router.is_sending("m1")

    @pytest.mark.parametrize(
        "code",
        [
            TransferResult.DENIED_NO_SPACE,
            TransferResult.DENIED_TTL,
            TransferResult.DENIED_POLICY,
        ],
    )
    def test_link_refusal_passes_through(
        self, router: EpidemicRouter, link: FakeLink, code: TransferResult
    ) -> None:
        """Refusals from the peer keep the permit."""
        router.on_link_up(link, _peer())
        link.result = code

        assert router.start_transfer(FakeMessage("m1", "C"), link) is code
        assert router.quota_for(link) == 1

    def test_unknown_refusal_code_is_unspecified(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """Negative codes outside the known set read as an unspecified refusal."""
        router.on_link_up(link, _peer())
        link.result = -7  # type: ignore[assignment]

        result = router.start_transfer(FakeMessage("m1", "C"), link)

        assert result is TransferResult.DENIED_UNSPECIFIED
        assert router.quota_for(link) == 1
        assert not router.is_sending("m1")

    def test_delete_delivered_purges_on_denied_old(
        self, clock: FakeClock, link: FakeLink
    ) -> None:
        """Destination already holding the message removes the local copy."""
        router = make_router("A", clock, config=RouterConfig(delete_delivered=True))
        message = FakeMessage("m1", "B")
        router.buffer.add(message)
        router.on_link_up(link, _peer())
        link.result = TransferResult.DENIED_OLD

        router.start_transfer(message, link)

        assert router.buffer.deleted == [("m1", False)]

    def test_denied_old_keeps_copy_without_flag(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """Without delete_delivered the copy survives."""
        message = FakeMessage("m1", "B")
        router.buffer.add(message)
        router.on_link_up(link, _peer())
        link.result = TransferResult.DENIED_OLD

        router.start_transfer(message, link)

        assert router.buffer.ids() == {"m1"}

    def test_denied_old_from_relay_keeps_copy(self, clock: FakeClock, link: FakeLink) -> None:
        """Only the final recipient's refusal triggers deletion."""
        router = make_router("A", clock, config=RouterConfig(delete_delivered=True))
        message = FakeMessage("m1", "C")
        router.buffer.add(message)
        router.on_link_up(link, _peer())
        link.result = TransferResult.DENIED_OLD

        router.start_transfer(message, link)

        assert router.buffer.ids() == {"m1"}


class TestMakeRoomFor:
    """Drop-oldest eviction."""

    def test_enough_space_evicts_nothing(self, router: EpidemicRouter) -> None:
        """Room already available needs no eviction."""
        router.buffer.add(FakeMessage("m1", "C", size=40))

        assert router.make_room_for(60)
        assert router.buffer.deleted == []

    def test_evicts_oldest_first(self, router: EpidemicRouter) -> None:
        """Oldest messages go first and each eviction is a drop."""
        router.buffer.add(
            FakeMessage("new", "C", size=40, receive_time=3.0),
            FakeMessage("old", "C", size=40, receive_time=1.0),
            FakeMessage("mid", "C", size=10, receive_time=2.0),
        )

        assert router.make_room_for(50)

        assert router.buffer.deleted == [("old", True)]
        assert router.congestion_telemetry().drops == 1

    def test_never_evicts_message_in_transfer(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """A message being sent is skipped even when it is the oldest."""
        sending = FakeMessage("sending", "C", size=50, receive_time=0.0)
        idle = FakeMessage("idle", "C", size=50, receive_time=5.0)
        router.buffer.add(sending, idle)
        router.on_link_up(link, _peer())
        router.start_transfer(sending, link)

        assert router.make_room_for(50)

        assert router.buffer.ids() == {"sending"}

    def test_fails_when_only_sending_messages_remain(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """Eviction stops when nothing idle is left."""
        sending = FakeMessage("sending", "C", size=100)
        router.buffer.add(sending)
        router.on_link_up(link, _peer())
        router.start_transfer(sending, link)

        assert not router.make_room_for(10)
        assert router.buffer.ids() == {"sending"}

    def test_oversized_message_leaves_buffer_unchanged(
        self, router: EpidemicRouter
    ) -> None:
        """A size above capacity fails without evicting."""
        router.buffer.add(FakeMessage("m1", "C", size=30))

        assert not router.make_room_for(101)
        assert router.buffer.ids() == {"m1"}
        assert router.congestion_telemetry().drops == 0


class TestMessageFullyReceived:
    """Replication counting and receipt creation."""

    def test_relay_counts_replication_only(self, router: EpidemicRouter) -> None:
        """Messages for other nodes do not create receipts."""
        message = FakeMessage("m1", "C")

        returned = router.message_fully_received(message, "B")

        assert returned is message
        assert router.congestion_telemetry().replications == 1
        assert "m1" not in router.receipts

    def test_destination_issues_receipt(
        self, router: EpidemicRouter, clock: FakeClock
    ) -> None:
        """Final recipient records when and for how long the receipt lives."""
        clock.time = 7.5

        router.message_fully_received(FakeMessage("m1", "A", ttl=30.0), "B")

        assert router.receipts.get("m1") == Receipt(creation_time=7.5, ttl=30.0)

    def test_existing_receipt_is_not_replaced(
        self, router: EpidemicRouter, clock: FakeClock
    ) -> None:
        """Duplicate deliveries keep the first receipt."""
        router.message_fully_received(FakeMessage("m1", "A"), "B")
        clock.time = 20.0

        router.message_fully_received(FakeMessage("m1", "A"), "C")

        assert router.receipts.get("m1").creation_time == 0.0
        assert router.congestion_telemetry().replications == 2


class TestUpdateTick:
    """Generic scheduling tick."""

    def test_idle_without_messages(self, router: EpidemicRouter, link: FakeLink) -> None:
        """Nothing to send means no transfer attempt."""
        router.on_link_up(link, _peer())

        assert router.update() is None
        assert link.started == []

    def test_deliverable_messages_go_first(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """Message destined to the peer jumps the queue."""
        router.buffer.add(
            FakeMessage("relay", "C", receive_time=0.0),
            FakeMessage("direct", "B", receive_time=9.0),
        )
        router.on_link_up(link, _peer())

        started = router.update()

        assert started.id == "direct"

    def test_fifo_order_by_receive_time(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """Without deliverables the oldest message is offered first."""
        router.buffer.add(
            FakeMessage("late", "C", receive_time=4.0),
            FakeMessage("early", "D", receive_time=1.0),
        )
        router.on_link_up(link, _peer())

        assert router.update().id == "early"

    def test_no_new_transfer_while_sending(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """One outbound transfer at a time."""
        router.buffer.add(FakeMessage("m1", "C"), FakeMessage("m2", "C"))
        other = FakeLink("A", "D")
        router.on_link_up(link, _peer())
        router.on_link_up(other, _peer())
        router.update()

        assert router.update() is None

    def test_no_transfer_while_receiving(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """A busy inbound link blocks the tick even with another link ready."""
        router.buffer.add(FakeMessage("m1", "C"))
        other = FakeLink("A", "C")
        router.on_link_up(link, _peer())
        router.on_link_up(other, _peer())
        link.start_transfer("B", FakeMessage("x", "A"))

        assert router.is_transferring()
        assert router.update() is None
        assert other.started == []

        link.finish()

        assert router.update().id == "m1"

    def test_exhausted_link_is_not_used(
        self, router: EpidemicRouter, link: FakeLink
    ) -> None:
        """After the single permit is spent the tick starts nothing."""
        router.buffer.add(FakeMessage("m1", "C"), FakeMessage("m2", "C"))
        router.on_link_up(link, _peer())
        router.update()
        link.finish()

        assert router.update() is None
        assert len(link.started) == 1

    def test_random_queue_is_reproducible(self, clock: FakeClock) -> None:
        """Seeded random send queues produce the same order."""
        config = RouterConfig(send_queue_mode="random")
        orders = []
        for _ in range(2):
            router = make_router("A", clock, config=config, seed=5)
            router.buffer.add(*(FakeMessage(f"m{i}", "C") for i in range(6)))
            orders.append([m.id for m in router.sorted_messages()])

        assert orders[0] == orders[1]
        assert sorted(orders[0]) == [f"m{i}" for i in range(6)]
