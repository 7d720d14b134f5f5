# supergains/services/lock_service.py
import uuid

import redis

from supergains.utils.logging import get_logger
from supergains.utils.retry import redis_retry
from supergains.utils.settings import REDIS_URL

logger = get_logger(__name__)

#compare-and-delete in one Lua script, nothing can run between GET and DEL
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class LockService:
    """
    -checkout lock per user (one checkout in flight at a time)
    -release only by the holder of the token
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def new_token() -> str:
        return uuid.uuid4().hex

    @redis_retry()
    def acquire_checkout_lock(self, user_id: int, token: str, ttl: int) -> bool:
        key = f"checkout:user:{user_id}:lock"
        logger.info(f"Acquire lock {key}")
        #SET checkout:user:1:lock <token> NX EX ttl, expires on its own if the worker dies
        return bool(self.redis.set(name=key, value=token, nx=True, ex=ttl))

    @redis_retry()
    def release_checkout_lock(self, user_id: int, token: str) -> bool:
        key = f"checkout:user:{user_id}:lock"
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    @redis_retry()
    def ping(self) -> bool:
        return bool(self.redis.ping())
