"""Random number generation utilities for dtnroute."""

import numpy as np


def make_rng(seed_value: int | None = None) -> np.random.Generator:
    """Create an independent numpy random generator.

    Each router and exploration policy owns its own generator so that
    per-node decisions stay reproducible regardless of event interleaving.

    :param seed_value: Seed for the generator, None for system entropy
    :type seed_value: int | None
    :return: A fresh random generator
    :rtype: np.random.Generator
    :raises ValueError: If seed_value is negative

    Example:
        >>> rng = make_rng(42)
        >>> u = rng.random()
    """
    if seed_value is not None and seed_value < 0:
        raise ValueError("Seed value must be non-negative")
    return np.random.default_rng(seed_value)
