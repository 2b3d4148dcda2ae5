"""
Interfaces for dtnroute.

- host: Structural protocols the simulation host must satisfy
- router: AbstractDTNRouter with the generic scheduling-tick driver
- exploration: AbstractExplorationPolicy for the learning engine
"""

from dtnroute.interfaces.exploration import AbstractExplorationPolicy
from dtnroute.interfaces.host import (
    ClockLike,
    ContactPeer,
    LinkLike,
    MessageBufferLike,
    MessageLike,
)
from dtnroute.interfaces.router import AbstractDTNRouter

__all__ = [
    "AbstractDTNRouter",
    "AbstractExplorationPolicy",
    "ClockLike",
    "ContactPeer",
    "LinkLike",
    "MessageBufferLike",
    "MessageLike",
]
