"""Business settings read from the ``[custom]`` section of domain.toml."""

from datetime import timedelta

from protean.utils.globals import current_domain

DEFAULT_RESERVATION_TTL_HOURS = 24
DEFAULT_MAX_CONFLICT_RETRIES = 3


def _custom(key, default):
    custom = current_domain.config.get("custom") or {}
    value = custom.get(key)
    return default if value is None else value


def reservation_ttl() -> timedelta:
    """How long a reservation holds stock before the sweeper may expire it."""
    return timedelta(hours=float(_custom("RESERVATION_TTL_HOURS", DEFAULT_RESERVATION_TTL_HOURS)))


def max_conflict_retries() -> int:
    """Attempts made for a command that keeps losing the optimistic-lock race."""
    return max(1, int(_custom("MAX_CONFLICT_RETRIES", DEFAULT_MAX_CONFLICT_RETRIES)))
