"""Pluggable fault injection and latency policies for the simulated backend."""

import random
from typing import Callable
from typing import Optional

# Returns True when the call should succeed.
FaultPolicy = Callable[[], bool]

# Returns the number of seconds a call should wait before resolving.
DelayPolicy = Callable[[], float]


def success_rate_policy(
    rate: float, rng: Optional[random.Random] = None
) -> FaultPolicy:
    """Succeed each call independently with probability ``rate``."""
    if not 0 <= rate <= 1:
        raise ValueError(f"Success rate must be between 0 and 1, got {rate}")
    rng = rng or random.Random()

    def policy() -> bool:
        return rng.random() < rate

    return policy


def always_succeed() -> FaultPolicy:
    return lambda: True


def always_fail() -> FaultPolicy:
    return lambda: False


def random_delay(
    max_delay_ms: float = 1000, rng: Optional[random.Random] = None
) -> DelayPolicy:
    """Wait a whole number of tenths of ``max_delay_ms``, strictly below it."""
    if max_delay_ms < 0:
        raise ValueError(f"Maximum delay must not be negative, got {max_delay_ms}")
    rng = rng or random.Random()
    step = max_delay_ms / 10 / 1000

    def policy() -> float:
        return rng.randrange(10) * step

    return policy


def no_delay() -> DelayPolicy:
    return lambda: 0.0
