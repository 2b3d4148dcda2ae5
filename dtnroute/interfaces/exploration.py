"""
Abstract interface for exploration policies.

This module defines the AbstractExplorationPolicy interface that all
action-selection rules used by the tabular learning engine must implement.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence


class AbstractExplorationPolicy(ABC):
    """
    Abstract interface for exploration policies.

    An exploration policy trades off trying new actions against exploiting
    known-good ones. It receives the value estimate of every action in the
    current state together with a feasibility mask and returns the index of
    the chosen action.
    """

    @abstractmethod
    def choose_action(
        self, estimates: Sequence[float], feasible: Sequence[bool]
    ) -> int:
        """
        Choose an action index.

        :param estimates: Value estimate of every action (expected discounted
            reward or any other usefulness score)
        :type estimates: Sequence[float]
        :param feasible: Feasibility mask of the same length (True = allowed)
        :type feasible: Sequence[bool]
        :return: Index of a feasible action
        :rtype: int
        :raises InvalidStateError: If no action is feasible
        """

    def get_name(self) -> str:
        """
        Get policy name.

        :return: Policy name
        :rtype: str
        """
        return self.__class__.__name__
