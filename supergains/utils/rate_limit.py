# supergains/utils/rate_limit.py
import math
import time
from dataclasses import dataclass

from limits import RateLimitItem, RateLimitItemPerHour, RateLimitItemPerMinute
from limits.storage import storage_from_string
from limits.strategies import FixedWindowRateLimiter

from supergains.utils.logging import get_logger
from supergains.utils.settings import (
    RATE_LIMIT_ADMIN_MAX,
    RATE_LIMIT_AUTH_MAX,
    RATE_LIMIT_ORDER_CREATE_MAX,
    RATE_LIMIT_REGISTER_MAX,
    RATE_LIMIT_STORAGE_URI,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    name: str
    item: RateLimitItem
    message: str
    code: str


@dataclass
class RateLimitState:
    limit: int
    remaining: int
    reset_at: int  # epoch seconds
    exceeded: bool

    def headers(self) -> dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_at),
        }
        if self.exceeded:
            headers["Retry-After"] = str(max(1, math.ceil(self.reset_at - time.time())))
        return headers


POLICIES = {
    "auth": RateLimitPolicy(
        "auth",
        RateLimitItemPerMinute(RATE_LIMIT_AUTH_MAX, 15),
        "Too many authentication attempts. Try again in 15 minutes.",
        "AUTH_RATE_LIMIT_EXCEEDED",
    ),
    "register": RateLimitPolicy(
        "register",
        RateLimitItemPerHour(RATE_LIMIT_REGISTER_MAX, 1),
        "Too many registration attempts. Try again in 1 hour.",
        "REGISTER_RATE_LIMIT_EXCEEDED",
    ),
    "order_create": RateLimitPolicy(
        "order_create",
        RateLimitItemPerMinute(RATE_LIMIT_ORDER_CREATE_MAX, 15),
        "Too many orders created. Try again in 15 minutes.",
        "ORDER_CREATE_RATE_LIMIT_EXCEEDED",
    ),
    "admin": RateLimitPolicy(
        "admin",
        RateLimitItemPerMinute(RATE_LIMIT_ADMIN_MAX, 5),
        "Too many admin requests. Try again in 5 minutes.",
        "ADMIN_RATE_LIMIT_EXCEEDED",
    ),
}


class RateLimiter:
    """Thin wrapper over `limits`: one fixed window per (policy, client key)."""

    def __init__(self, storage_uri: str = RATE_LIMIT_STORAGE_URI):
        self.storage = storage_from_string(storage_uri)
        self.strategy = FixedWindowRateLimiter(self.storage)

    def hit(self, policy: RateLimitPolicy, key: str) -> RateLimitState:
        allowed = self.strategy.hit(policy.item, policy.name, key)
        stats = self.strategy.get_window_stats(policy.item, policy.name, key)
        state = RateLimitState(
            limit=policy.item.amount,
            remaining=max(0, stats.remaining),
            reset_at=int(stats.reset_time),
            exceeded=not allowed,
        )
        if state.exceeded:
            logger.warning(f"Rate limit '{policy.name}' exceeded for {key}")
        return state

    def reset(self) -> None:
        self.storage.reset()


_limiter: RateLimiter | None = None


def get_limiter() -> RateLimiter:
    global _limiter
    if _limiter is None:
        _limiter = RateLimiter()
    return _limiter
