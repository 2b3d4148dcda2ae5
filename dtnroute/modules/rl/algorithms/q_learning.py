"""
Tabular Q-learning decision engine.

A dense ``states x actions`` value table with per-pair visit counts and a
fixed feasibility mask. Action selection is delegated to a pluggable
exploration policy; updates use a visit-decayed learning rate.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from dtnroute.domain.config import LearningConfig
from dtnroute.interfaces.exploration import AbstractExplorationPolicy
from dtnroute.modules.rl.algorithms.exploration import greedy_feasible_action
from dtnroute.modules.rl.algorithms.registry import (
    create_exploration_policy_from_config,
)
from dtnroute.modules.rl.errors import (
    InvalidActionError,
    InvalidStateError,
    RLConfigurationError,
)
from dtnroute.utils.logging_config import get_logger
from dtnroute.utils.random import make_rng

logger = get_logger(__name__)

# Upper bound of the uniform values used by the randomized initialization
RANDOM_INIT_SCALE = 0.1


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


class QLearning:
    """
    Q-learning table with visit-decayed updates.

    Exactly one initialization mode is used: a zero table (default), small
    uniform random values (``randomize=True``) or a copy of a pre-trained
    table (``initial_values``).
    """

    def __init__(
        self,
        states: int,
        actions: int,
        exploration_policy: AbstractExplorationPolicy,
        action_restriction: Any | None = None,
        randomize: bool = False,
        initial_values: Any | None = None,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
        learning_rate: float = 0.25,
        discount_factor: float = 0.2,
    ) -> None:
        """
        Initialize the Q-table.

        :param states: Number of possible states
        :type states: int
        :param actions: Number of possible actions
        :type actions: int
        :param exploration_policy: Rule used to pick actions from a value row
        :type exploration_policy: AbstractExplorationPolicy
        :param action_restriction: Boolean ``(states, actions)`` feasibility mask,
            None allows every action everywhere
        :type action_restriction: Any | None
        :param randomize: Fill the table with uniform values in [0, 0.1)
        :type randomize: bool
        :param initial_values: Pre-trained ``(states, actions)`` table to copy
        :type initial_values: Any | None
        :param seed: Seed of the generator used for randomized initialization
        :type seed: int | None
        :param rng: Generator to use instead of seeding a new one
        :type rng: np.random.Generator | None
        :param learning_rate: Static learning rate, clamped to [0, 1]
        :type learning_rate: float
        :param discount_factor: Discount of the next-state value, clamped to [0, 1]
        :type discount_factor: float
        :raises RLConfigurationError: On bad dimensions or conflicting init modes
        """
        if states < 1 or actions < 1:
            raise RLConfigurationError(
                f"States and actions must be positive, got {states}x{actions}"
            )
        if randomize and initial_values is not None:
            raise RLConfigurationError(
                "Choose either randomized or pre-trained initial values, not both"
            )

        self._states = int(states)
        self._actions = int(actions)
        self.exploration_policy = exploration_policy
        self._action_restriction = self._build_restriction(action_restriction)
        self._visit_counts = np.zeros((self._states, self._actions), dtype=np.int64)
        self._q_values = self._build_table(randomize, initial_values, seed, rng)

        self._learning_rate = _clamp_unit(learning_rate)
        self._discount_factor = _clamp_unit(discount_factor)
        self.last_td_error: float | None = None

    @classmethod
    def from_config(
        cls,
        states: int,
        actions: int,
        learning_config: LearningConfig,
        action_restriction: Any | None = None,
        initial_values: Any | None = None,
    ) -> QLearning:
        """
        Build a table and its exploration policy from configuration.

        :param states: Number of possible states
        :type states: int
        :param actions: Number of possible actions
        :type actions: int
        :param learning_config: Learning parameters
        :type learning_config: LearningConfig
        :param action_restriction: Feasibility mask, None allows everything
        :type action_restriction: Any | None
        :param initial_values: Pre-trained table to copy
        :type initial_values: Any | None
        :return: Configured Q-learning instance
        :rtype: QLearning
        """
        rng = make_rng(learning_config.seed)
        return cls(
            states=states,
            actions=actions,
            exploration_policy=create_exploration_policy_from_config(
                learning_config, rng=rng
            ),
            action_restriction=action_restriction,
            randomize=learning_config.randomize,
            initial_values=initial_values,
            rng=rng,
            learning_rate=learning_config.learning_rate,
            discount_factor=learning_config.discount_factor,
        )

    def _build_restriction(self, action_restriction: Any | None) -> np.ndarray:
        shape = (self._states, self._actions)
        if action_restriction is None:
            restriction = np.ones(shape, dtype=bool)
        else:
            restriction = np.array(action_restriction, dtype=bool)
        if restriction.shape != shape:
            raise RLConfigurationError(
                f"Action restriction shape {restriction.shape} does not match {shape}"
            )
        restriction.setflags(write=False)
        return restriction

    def _build_table(
        self,
        randomize: bool,
        initial_values: Any | None,
        seed: int | None,
        rng: np.random.Generator | None,
    ) -> np.ndarray:
        shape = (self._states, self._actions)
        if initial_values is not None:
            table = np.array(initial_values, dtype=float)
            if table.shape != shape:
                raise RLConfigurationError(
                    f"Initial values shape {table.shape} does not match {shape}"
                )
            return table

        if randomize:
            generator = rng if rng is not None else make_rng(seed)
            return generator.random(shape) * RANDOM_INIT_SCALE

        return np.zeros(shape, dtype=float)

    @property
    def states(self) -> int:
        """Amount of possible states."""
        return self._states

    @property
    def actions(self) -> int:
        """Amount of possible actions."""
        return self._actions

    @property
    def q_values(self) -> np.ndarray:
        """The ``(states, actions)`` value table."""
        return self._q_values

    @property
    def visit_counts(self) -> np.ndarray:
        """Number of times each (state, action) pair has been selected."""
        return self._visit_counts

    @property
    def action_restriction(self) -> np.ndarray:
        """Read-only feasibility mask."""
        return self._action_restriction

    @property
    def learning_rate(self) -> float:
        """
        Learning rate in [0, 1].

        Overwritten by every update with the visit-decayed rate of the pair
        being updated.
        """
        return self._learning_rate

    @learning_rate.setter
    def learning_rate(self, value: float) -> None:
        self._learning_rate = _clamp_unit(value)

    @property
    def discount_factor(self) -> float:
        """
        Discount factor in [0, 1] applied to the best next-state estimate.

        At 1 the expected summary reward is not discounted; smaller values
        weigh the future less.
        """
        return self._discount_factor

    @discount_factor.setter
    def discount_factor(self, value: float) -> None:
        self._discount_factor = _clamp_unit(value)

    def _check_state(self, state: int) -> int:
        if not 0 <= state < self._states:
            raise InvalidStateError(
                f"State {state} is out of range [0, {self._states})"
            )
        return int(state)

    def _check_action(self, action: int) -> int:
        if not 0 <= action < self._actions:
            raise InvalidActionError(
                f"Action {action} is out of range [0, {self._actions})"
            )
        return int(action)

    def select_action(self, state: int) -> int:
        """
        Get next action from the specified state.

        Increments the visit count of the chosen (state, action) pair.

        :param state: Current state to get an action for
        :type state: int
        :return: The action for the state
        :rtype: int
        :raises InvalidStateError: For out-of-range states or states without
            any feasible action
        """
        state = self._check_state(state)
        action = self.exploration_policy.choose_action(
            self._q_values[state], self._action_restriction[state]
        )
        action = self._check_action(action)
        self._visit_counts[state, action] += 1
        return action

    def greedy_action(self, state: int) -> int:
        """
        Best feasible action of a state without exploring or counting a visit.

        :param state: State to query
        :type state: int
        :return: Feasible action with the highest estimate, first on ties
        :rtype: int
        """
        state = self._check_state(state)
        return greedy_feasible_action(
            self._q_values[state], self._action_restriction[state]
        )

    def update(
        self, previous_state: int, action: int, reward: float, next_state: int
    ) -> None:
        """
        Update the Q-value of the previous state-action pair.

        The learning rate becomes ``1 / (1 + visits)`` for the pair, and the
        bootstrap target uses the maximum over every action of the next
        state regardless of feasibility.

        :param previous_state: Previous state
        :type previous_state: int
        :param action: Action which led from the previous to the next state
        :type action: int
        :param reward: Reward received for taking the action
        :type reward: float
        :param next_state: Next state
        :type next_state: int
        """
        previous_state = self._check_state(previous_state)
        action = self._check_action(action)
        next_state = self._check_state(next_state)

        max_next_expected_reward = float(np.max(self._q_values[next_state]))
        self._learning_rate = 1.0 / (1.0 + float(self._visit_counts[previous_state, action]))

        current_q = float(self._q_values[previous_state, action])
        target = reward + self._discount_factor * max_next_expected_reward
        self.last_td_error = current_q - target
        self._q_values[previous_state, action] = (
            current_q * (1.0 - self._learning_rate) + self._learning_rate * target
        )

        logger.debug(
            "Q(%d, %d): %.6f -> %.6f (rate=%.4f)",
            previous_state,
            action,
            current_q,
            self._q_values[previous_state, action],
            self._learning_rate,
        )

    def __repr__(self) -> str:
        return (
            f"QLearning(states={self._states}, actions={self._actions}, "
            f"policy={self.exploration_policy.get_name()})"
        )
