# pylint: disable=protected-access

"""Unit tests for dtnroute.modules.routing.congestion module."""

import pytest
from conftest import FakeMessage

from dtnroute.domain.config import CongestionConfig
from dtnroute.domain.receipt import CongestionTelemetry
from dtnroute.modules.routing.congestion import (
    CongestionEstimator,
    drop_ratio,
    extra_replications_from_buffer,
)
from dtnroute.modules.routing.errors import CongestionStateError, RoutingError


def _episode(estimator: CongestionEstimator, drops: int, reps: int) -> None:
    for _ in range(drops):
        estimator.record_drop()
    for _ in range(reps):
        estimator.record_replication()


class TestHelpers:
    """Drop ratio and buffer-derived replication term."""

    def test_drop_ratio(self) -> None:
        """Plain ratio of drops to replications."""
        assert drop_ratio(1, 4) == 0.25

    def test_drop_ratio_without_replications_is_one(self) -> None:
        """No replication at all counts as fully congested."""
        assert drop_ratio(0, 0) == 1.0
        assert drop_ratio(3, 0) == 1.0

    def test_extra_replications_skip_unrelayed(self) -> None:
        """Each relayed message adds hop_count - 1."""
        messages = [
            FakeMessage("a", "X", hop_count=0),
            FakeMessage("b", "X", hop_count=1),
            FakeMessage("c", "X", hop_count=4),
        ]

        assert extra_replications_from_buffer(messages) == 3

    def test_extra_replications_empty_buffer(self) -> None:
        """Empty buffer contributes nothing."""
        assert extra_replications_from_buffer([]) == 0


class TestCounters:
    """Local drop and replication counters."""

    def test_telemetry_does_not_reset(self) -> None:
        """Peers read live counters without clearing them."""
        estimator = CongestionEstimator()
        _episode(estimator, drops=2, reps=3)

        first = estimator.telemetry()
        second = estimator.telemetry()

        assert first == second == CongestionTelemetry(drops=2, replications=3)

    def test_update_resets_counters(self) -> None:
        """Counters start over after every contact end."""
        estimator = CongestionEstimator()
        _episode(estimator, drops=2, reps=3)

        estimator.update(None, 0, 1.0)

        assert estimator.drops == 0
        assert estimator.replications == 0


class TestUpdate:
    """Smoothed congestion value and AIMD limit."""

    def test_half_ratio_episode(self) -> None:
        """drops=5, reps=5 gives CV = 0.9 * 0.5 + 0.1 * CV_old."""
        estimator = CongestionEstimator(CongestionConfig(initial_cv=0.3))
        _episode(estimator, drops=5, reps=5)

        new_cv = estimator.update(CongestionTelemetry(0, 0), 0, 1.0)

        assert new_cv == pytest.approx(0.9 * 0.5 + 0.1 * 0.3)
        assert estimator.cv == new_cv

    def test_peer_counts_are_added(self) -> None:
        """Peer drops and replications join the local ones."""
        estimator = CongestionEstimator()
        _episode(estimator, drops=1, reps=1)

        estimator.update(CongestionTelemetry(drops=1, replications=3), 0, 1.0)

        assert estimator.cv == pytest.approx(0.9 * 0.5)

    def test_extra_replications_dilute_ratio(self) -> None:
        """Buffer term is added to the replication count."""
        estimator = CongestionEstimator()
        _episode(estimator, drops=1, reps=1)

        estimator.update(None, 3, 1.0)

        assert estimator.cv == pytest.approx(0.9 * 0.25)

    def test_no_replications_is_maximal_congestion(self) -> None:
        """Empty contact drives CV up and the limit down."""
        estimator = CongestionEstimator(CongestionConfig(initial_limit=10))

        estimator.update(None, 0, 1.0)

        assert estimator.cv == pytest.approx(0.9)
        assert estimator.limit == 2

    def test_zero_drops_increase_limit_by_one_each_time(self) -> None:
        """Every zero-drop contact adds exactly one permit, without ceiling."""
        estimator = CongestionEstimator()
        limits = []

        for step in range(50):
            _episode(estimator, drops=0, reps=2)
            estimator.update(None, 0, float(step))
            limits.append(estimator.limit)

        assert limits == list(range(2, 52))
        assert estimator.cv == 0.0

    def test_growing_cv_applies_ceiled_decrease(self) -> None:
        """Multiplicative decrease rounds up."""
        estimator = CongestionEstimator(CongestionConfig(initial_limit=7))
        _episode(estimator, drops=1, reps=2)

        estimator.update(None, 0, 1.0)

        # ceil(7 * 0.2) = 2
        assert estimator.limit == 2

    def test_small_limit_does_not_collapse_to_zero(self) -> None:
        """ceil keeps a limit of one at one."""
        estimator = CongestionEstimator()

        for step in range(5):
            estimator.update(None, 0, float(step))

        assert estimator.limit == 1

    def test_equal_cv_counts_as_not_growing(self) -> None:
        """A stable CV still earns the additive increase."""
        estimator = CongestionEstimator(CongestionConfig(initial_cv=0.5, initial_limit=3))
        _episode(estimator, drops=1, reps=2)

        estimator.update(None, 0, 1.0)

        assert estimator.cv == pytest.approx(0.5)
        assert estimator.limit == 4

    def test_history_holds_pre_update_values(self) -> None:
        """History records the CV in force before each update."""
        estimator = CongestionEstimator()
        _episode(estimator, drops=1, reps=1)
        estimator.update(None, 0, 2.0)
        estimator.update(None, 0, 5.0)

        history = [(sample.cv, sample.time) for sample in estimator.history]

        assert history[0] == (0.0, 2.0)
        assert history[1][0] == pytest.approx(0.9)
        assert history[1][1] == 5.0

    def test_constant_ratio_converges(self) -> None:
        """Repeating the same ratio pulls CV to that ratio."""
        estimator = CongestionEstimator()

        for step in range(40):
            _episode(estimator, drops=1, reps=4)
            estimator.update(None, 0, float(step))

        assert estimator.cv == pytest.approx(0.25, abs=1e-9)

    def test_limit_stays_non_negative(self) -> None:
        """Mixed histories never push the limit below zero."""
        estimator = CongestionEstimator(CongestionConfig(initial_limit=0))
        pattern = [(0, 3), (2, 2), (0, 0), (1, 5), (0, 1), (4, 1)]

        for step, (drops, reps) in enumerate(pattern * 5):
            _episode(estimator, drops, reps)
            estimator.update(None, 0, float(step))
            assert estimator.limit >= 0

    def test_negative_limit_is_state_error(self) -> None:
        """A corrupted limit is reported as a routing error."""
        estimator = CongestionEstimator(CongestionConfig(additive_increase=0))
        estimator._limit = -1
        _episode(estimator, drops=0, reps=1)

        with pytest.raises(CongestionStateError) as exc_info:
            estimator.update(None, 0, 1.0)

        assert isinstance(exc_info.value, RoutingError)
