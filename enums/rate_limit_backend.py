from enum import Enum


class RateLimitBackend(str, Enum):
    """
    Storage backend for request counters.
    """

    MEMORY = "memory"
    """
    Per-process dictionary guarded by a lock.
    Only correct for a single application instance.
    """

    REDIS = "redis"
    """
    Shared Redis counters (INCR + EXPIRE).
    Config: REDIS_URL
    """
