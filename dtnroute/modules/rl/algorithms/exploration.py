"""
Exploration policies for the tabular Q-learning engine.

Provides Boltzmann (softmax) exploration with a greedy fallback and an
epsilon-greedy alternative. Both only ever return indices marked feasible.
"""

import math
from collections.abc import Sequence

import numpy as np

from dtnroute.interfaces.exploration import AbstractExplorationPolicy
from dtnroute.modules.rl.errors import InvalidStateError, RLConfigurationError
from dtnroute.utils.random import make_rng


def _validate_inputs(
    estimates: Sequence[float], feasible: Sequence[bool]
) -> tuple[np.ndarray, np.ndarray]:
    """
    Convert inputs to arrays and check that at least one action is allowed.

    :param estimates: Value estimate of every action
    :type estimates: Sequence[float]
    :param feasible: Feasibility mask of the same length
    :type feasible: Sequence[bool]
    :return: Float estimates and indices of feasible actions
    :rtype: tuple[np.ndarray, np.ndarray]
    :raises InvalidStateError: On length mismatch or when nothing is feasible
    """
    estimates_arr = np.asarray(estimates, dtype=float)
    feasible_arr = np.asarray(feasible, dtype=bool)
    if estimates_arr.ndim != 1 or estimates_arr.shape != feasible_arr.shape:
        raise InvalidStateError(
            f"Estimates {estimates_arr.shape} and feasibility mask "
            f"{feasible_arr.shape} must be 1-D arrays of equal length"
        )

    feasible_indices = np.flatnonzero(feasible_arr)
    if feasible_indices.size == 0:
        raise InvalidStateError("No feasible action available in this state")
    return estimates_arr, feasible_indices


def greedy_feasible_action(
    estimates: Sequence[float], feasible: Sequence[bool]
) -> int:
    """
    Pick the feasible action with the highest estimate.

    Ties are broken by the first occurrence in index order.

    :param estimates: Value estimate of every action
    :type estimates: Sequence[float]
    :param feasible: Feasibility mask of the same length
    :type feasible: Sequence[bool]
    :return: Index of the best feasible action
    :rtype: int
    :raises InvalidStateError: If no action is feasible

    Example:
        >>> greedy_feasible_action([0.9, 0.5, 0.5], [False, True, True])
        1
    """
    estimates_arr, feasible_indices = _validate_inputs(estimates, feasible)
    return _greedy(estimates_arr, feasible_indices)


def _greedy(estimates_arr: np.ndarray, feasible_indices: np.ndarray) -> int:
    # np.argmax returns the first maximum
    best = int(np.argmax(estimates_arr[feasible_indices]))
    return int(feasible_indices[best])


class BoltzmannExploration(AbstractExplorationPolicy):
    """
    Softmax action selection.

    Every action is weighted by ``exp(estimate / temperature)``. The
    normalizer sums over all actions, feasible or not, but only feasible
    actions can be returned: feasible indices are scanned in order while
    accumulating normalized weights, and the first whose cumulative weight
    reaches a uniform draw wins. When no feasible index reaches the draw the
    last feasible index is returned, which also covers weights that all
    underflow to zero.

    A zero temperature, or weights that overflow, switch to deterministic
    greedy selection over feasible actions.

    :ivar _rng: Numpy random generator.
    :vartype _rng: numpy.random.Generator
    :ivar _seed: Original seed for reset.
    :vartype _seed: int | None
    """

    def __init__(
        self,
        temperature: float,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        """
        Initialize Boltzmann exploration.

        :param temperature: Non-negative temperature, low values act greedily
        :type temperature: float
        :param seed: Random seed for reproducibility
        :type seed: int | None
        :param rng: Generator to share with other components; overrides ``seed``
        :type rng: np.random.Generator | None
        """
        self._temperature = 0.0
        self.temperature = temperature
        self._seed = seed
        self._rng = rng if rng is not None else make_rng(seed)

    @property
    def temperature(self) -> float:
        """Balance between exploration (high) and greedy selection (low)."""
        return self._temperature

    @temperature.setter
    def temperature(self, value: float) -> None:
        if value < 0:
            raise RLConfigurationError(f"Temperature must be >= 0, got {value}")
        self._temperature = float(value)

    def choose_action(
        self, estimates: Sequence[float], feasible: Sequence[bool]
    ) -> int:
        """
        Choose an action by softmax sampling over the estimates.

        :param estimates: Value estimate of every action
        :type estimates: Sequence[float]
        :param feasible: Feasibility mask of the same length
        :type feasible: Sequence[bool]
        :return: Index of a feasible action
        :rtype: int
        :raises InvalidStateError: If no action is feasible
        """
        estimates_arr, feasible_indices = _validate_inputs(estimates, feasible)

        if self._temperature == 0:
            return _greedy(estimates_arr, feasible_indices)

        with np.errstate(over="ignore", under="ignore"):
            probabilities = np.exp(estimates_arr / self._temperature)
        probabilities_sum = float(probabilities.sum())

        if not math.isfinite(probabilities_sum):
            return _greedy(estimates_arr, feasible_indices)

        random_number = float(self._rng.random())
        # A sum that underflowed to zero never reaches the draw
        if probabilities_sum > 0.0:
            cumulative = 0.0
            for index in feasible_indices:
                cumulative += float(probabilities[index]) / probabilities_sum
                if random_number <= cumulative:
                    return int(index)

        return int(feasible_indices[-1])

    def reset_rng(self, seed: int | None = None) -> None:
        """
        Reset the random number generator.

        :param seed: New seed. If None, uses the original seed.
        :type seed: int | None
        """
        if seed is None:
            seed = self._seed
        self._rng = make_rng(seed)

    def get_name(self) -> str:
        return f"BoltzmannExploration(temperature={self._temperature})"


class EpsilonGreedyExploration(AbstractExplorationPolicy):
    """
    Epsilon-greedy action selection.

    With probability ``epsilon`` a feasible action is drawn uniformly,
    otherwise the greedy feasible action is returned.
    """

    def __init__(
        self,
        epsilon: float,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        """
        Initialize epsilon-greedy exploration.

        :param epsilon: Exploration probability in [0, 1]
        :type epsilon: float
        :param seed: Random seed for reproducibility
        :type seed: int | None
        :param rng: Generator to share with other components; overrides ``seed``
        :type rng: np.random.Generator | None
        """
        self._epsilon = 0.0
        self.epsilon = epsilon
        self._seed = seed
        self._rng = rng if rng is not None else make_rng(seed)

    @property
    def epsilon(self) -> float:
        """Probability of taking a random feasible action."""
        return self._epsilon

    @epsilon.setter
    def epsilon(self, value: float) -> None:
        if not 0.0 <= value <= 1.0:
            raise RLConfigurationError(f"Epsilon must be in [0, 1], got {value}")
        self._epsilon = float(value)

    def choose_action(
        self, estimates: Sequence[float], feasible: Sequence[bool]
    ) -> int:
        """Get action using epsilon-greedy strategy."""
        estimates_arr, feasible_indices = _validate_inputs(estimates, feasible)

        if self._rng.random() < self._epsilon:
            return int(self._rng.choice(feasible_indices))

        return _greedy(estimates_arr, feasible_indices)

    def reset_rng(self, seed: int | None = None) -> None:
        """
        Reset the random number generator.

        :param seed: New seed. If None, uses the original seed.
        :type seed: int | None
        """
        if seed is None:
            seed = self._seed
        self._rng = make_rng(seed)

    def get_name(self) -> str:
        return f"EpsilonGreedyExploration(epsilon={self._epsilon})"
