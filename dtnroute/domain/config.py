"""
Immutable router and learning configuration.

This module defines frozen dataclasses that capture every tunable of the
congestion-aware epidemic router and the tabular Q-learning engine.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any

# =============================================================================
# Defaults
# =============================================================================
DEFAULT_INITIAL_LIMIT = 1  # Transfers admitted per link before any feedback
DEFAULT_ADDITIVE_INCREASE = 1  # AI step applied when congestion does not grow
DEFAULT_MULTIPLICATIVE_DECREASE = 0.2  # MD factor applied when congestion grows
DEFAULT_ALPHA = 0.9  # Weight of the newest drop ratio in the smoothed CV
DEFAULT_INITIAL_CV = 0.0

DEFAULT_LEARNING_RATE = 0.25
DEFAULT_DISCOUNT_FACTOR = 0.2
DEFAULT_TEMPERATURE = 1.0
DEFAULT_EPSILON = 0.1

SEND_QUEUE_MODES = ("fifo", "random")
EXPLORATION_POLICIES = ("boltzmann", "epsilon_greedy")


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def _known_fields(cls: type, data: dict[str, Any]) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {key: value for key, value in data.items() if key in names}


@dataclass(frozen=True)
class CongestionConfig:
    """
    AIMD quota control parameters.

    Attributes:
        initial_limit: Per-link transfer permits granted before any feedback
        additive_increase: Added to the limit when the new CV does not exceed the old one
        multiplicative_decrease: Factor applied (then ceiled) when the CV grows
        alpha: Smoothing weight of the latest drop ratio, in [0, 1]
        initial_cv: Congestion value before the first contact ends
    """

    initial_limit: int = DEFAULT_INITIAL_LIMIT
    additive_increase: int = DEFAULT_ADDITIVE_INCREASE
    multiplicative_decrease: float = DEFAULT_MULTIPLICATIVE_DECREASE
    alpha: float = DEFAULT_ALPHA
    initial_cv: float = DEFAULT_INITIAL_CV

    def __post_init__(self) -> None:
        """Validate configuration after creation."""
        if self.initial_limit < 0:
            raise ValueError("initial_limit must be >= 0")
        if self.additive_increase < 0:
            raise ValueError("additive_increase must be >= 0")
        if not 0.0 <= self.multiplicative_decrease <= 1.0:
            raise ValueError("multiplicative_decrease must be in [0, 1]")
        if not 0.0 <= self.alpha <= 1.0:
            raise ValueError("alpha must be in [0, 1]")
        if self.initial_cv < 0.0:
            raise ValueError("initial_cv must be >= 0")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CongestionConfig:
        return cls(**_known_fields(cls, data))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RouterConfig:
    """
    Epidemic router behavior switches.

    Attributes:
        delete_delivered: Purge the local copy when the destination peer reports it already has it
        send_queue_mode: Order in which buffered messages are offered ("fifo" or "random")
        receipt_expiry: Sweep receipts whose TTL has elapsed at every link-up
        congestion: AIMD quota control parameters
    """

    delete_delivered: bool = False
    send_queue_mode: str = "fifo"
    receipt_expiry: bool = False
    congestion: CongestionConfig = field(default_factory=CongestionConfig)

    def __post_init__(self) -> None:
        """Validate configuration after creation."""
        if self.send_queue_mode not in SEND_QUEUE_MODES:
            raise ValueError(
                f"send_queue_mode must be one of {SEND_QUEUE_MODES}, "
                f"got '{self.send_queue_mode}'"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RouterConfig:
        """
        Build from flat router options plus an optional nested congestion dict.

        :param data: Router options; a ``congestion`` key may hold a dict.
        :type data: dict[str, Any]
        :return: Router configuration.
        :rtype: RouterConfig
        """
        options = _known_fields(cls, data)
        congestion = options.pop("congestion", None)
        if isinstance(congestion, dict):
            congestion = CongestionConfig.from_dict(congestion)
        if congestion is None:
            congestion = CongestionConfig()
        return cls(congestion=congestion, **options)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LearningConfig:
    """
    Q-learning engine parameters.

    ``learning_rate`` and ``discount_factor`` are clamped into [0, 1] on
    creation rather than rejected.

    Attributes:
        exploration_policy: Registered exploration policy name
        temperature: Boltzmann temperature, 0 selects greedily
        epsilon: Exploration probability of the epsilon-greedy policy
        learning_rate: Static learning rate, superseded by visit decay once updates run
        discount_factor: Weight of the bootstrapped next-state value
        randomize: Initialize the table with small uniform random values
        seed: Seed of the exploration and initialization generators
    """

    exploration_policy: str = "boltzmann"
    temperature: float = DEFAULT_TEMPERATURE
    epsilon: float = DEFAULT_EPSILON
    learning_rate: float = DEFAULT_LEARNING_RATE
    discount_factor: float = DEFAULT_DISCOUNT_FACTOR
    randomize: bool = False
    seed: int | None = None

    def __post_init__(self) -> None:
        """Validate and clamp configuration after creation."""
        if self.exploration_policy not in EXPLORATION_POLICIES:
            raise ValueError(
                f"exploration_policy must be one of {EXPLORATION_POLICIES}, "
                f"got '{self.exploration_policy}'"
            )
        if self.temperature < 0:
            raise ValueError("temperature must be >= 0")
        if not 0.0 <= self.epsilon <= 1.0:
            raise ValueError("epsilon must be in [0, 1]")
        if self.seed is not None and self.seed < 0:
            raise ValueError("seed must be >= 0")
        object.__setattr__(self, "learning_rate", _clamp_unit(self.learning_rate))
        object.__setattr__(self, "discount_factor", _clamp_unit(self.discount_factor))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LearningConfig:
        return cls(**_known_fields(cls, data))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
