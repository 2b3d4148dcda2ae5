"""
RL Algorithms Module.

Provides the tabular Q-learning engine and the exploration policies it
delegates action selection to.
"""

from .exploration import (
    BoltzmannExploration,
    EpsilonGreedyExploration,
    greedy_feasible_action,
)
from .q_learning import QLearning
from .registry import (
    EXPLORATION_POLICY_REGISTRY,
    create_exploration_policy,
    create_exploration_policy_from_config,
)

__all__ = [
    "QLearning",
    "BoltzmannExploration",
    "EpsilonGreedyExploration",
    "greedy_feasible_action",
    "EXPLORATION_POLICY_REGISTRY",
    "create_exploration_policy",
    "create_exploration_policy_from_config",
]
