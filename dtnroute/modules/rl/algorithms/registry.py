"""
Exploration policy registry.

Maps configuration names to exploration policy classes so the learning
engine can be assembled from a configuration file.
"""

from typing import Any

import numpy as np

from dtnroute.domain.config import LearningConfig
from dtnroute.interfaces.exploration import AbstractExplorationPolicy
from dtnroute.modules.rl.algorithms.exploration import (
    BoltzmannExploration,
    EpsilonGreedyExploration,
)
from dtnroute.modules.rl.errors import AlgorithmNotFoundError

EXPLORATION_POLICY_REGISTRY: dict[str, type[AbstractExplorationPolicy]] = {
    "boltzmann": BoltzmannExploration,
    "epsilon_greedy": EpsilonGreedyExploration,
}


def get_exploration_policy_class(name: str) -> type[AbstractExplorationPolicy]:
    """
    Look up an exploration policy class by name.

    :param name: Registered policy name
    :type name: str
    :return: The policy class
    :rtype: type[AbstractExplorationPolicy]
    :raises AlgorithmNotFoundError: If the name is not registered
    """
    if name not in EXPLORATION_POLICY_REGISTRY:
        raise AlgorithmNotFoundError(
            f"Exploration policy '{name}' not found. "
            f"Available policies: {list(EXPLORATION_POLICY_REGISTRY.keys())}"
        )
    return EXPLORATION_POLICY_REGISTRY[name]


def create_exploration_policy(name: str, **kwargs: Any) -> AbstractExplorationPolicy:
    """
    Create an exploration policy instance by name.

    :param name: Registered policy name
    :type name: str
    :param kwargs: Constructor arguments of the policy
    :return: Policy instance
    :rtype: AbstractExplorationPolicy
    """
    return get_exploration_policy_class(name)(**kwargs)


def create_exploration_policy_from_config(
    learning_config: LearningConfig, rng: np.random.Generator | None = None
) -> AbstractExplorationPolicy:
    """
    Create the exploration policy described by a learning configuration.

    :param learning_config: Learning parameters
    :type learning_config: LearningConfig
    :param rng: Generator to share with the Q-table, seeded from the config if None
    :type rng: np.random.Generator | None
    :return: Policy instance
    :rtype: AbstractExplorationPolicy
    """
    if learning_config.exploration_policy == "boltzmann":
        return create_exploration_policy(
            "boltzmann",
            temperature=learning_config.temperature,
            seed=learning_config.seed,
            rng=rng,
        )
    return create_exploration_policy(
        learning_config.exploration_policy,
        epsilon=learning_config.epsilon,
        seed=learning_config.seed,
        rng=rng,
    )


def list_exploration_policies() -> list[str]:
    """List all registered exploration policy names."""
    return list(EXPLORATION_POLICY_REGISTRY.keys())
