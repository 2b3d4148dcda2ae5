"""
Custom exceptions for the reinforcement learning module.

This module defines a hierarchy of exceptions used throughout the RL components
for proper error handling and debugging.
"""


class RLError(Exception):
    """
    Base exception for all RL module errors.

    This serves as the root exception class for all reinforcement learning
    related errors, allowing for broad exception handling when needed.
    """


class RLConfigurationError(RLError):
    """
    Raised when RL configuration parameters are invalid or inconsistent.

    This covers mismatched table dimensions, conflicting initialization
    modes and out-of-range exploration parameters.
    """


class AlgorithmNotFoundError(RLError):
    """
    Raised when a requested algorithm is not found in the registry.

    This occurs when attempting to use an exploration policy that hasn't been
    registered or doesn't exist in the available set.
    """


class InvalidStateError(RLError):
    """
    Raised when a state index or a state's action row cannot be used.

    This occurs for out-of-range state indices and for states in which no
    action is marked feasible, both of which indicate a misconfigured table.
    """


class AgentError(RLError):
    """
    Raised when agent operations fail.

    This serves as a base class for agent-specific errors.
    """


class InvalidActionError(AgentError):
    """
    Raised when an invalid action is attempted by an agent.

    This occurs when an action index is outside the action space.
    """
