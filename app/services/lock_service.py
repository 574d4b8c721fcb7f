import uuid
from contextlib import contextmanager

import redis

from app.domain.errors import ConcurrentModification
from app.utils.retry import redis_retry
from app.utils.settings import REDIS_URL, ORDER_LOCK_TTL_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nikt nie wcisnie sie miedzy GET a DEL
#zwalnia tylko ten, kto trzyma token


class LockService:
    """
    -blokada zamowienia na czas read -> validate -> write
    -zwalnianie locka
    -atomowosc przy pomocy lua
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None, ttl: int | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl or ORDER_LOCK_TTL_SECONDS

    @staticmethod
    def _key(order_id: int) -> str:
        return f"order:{order_id}:lock"

    @redis_retry()
    def acquire_order_lock(self, order_id: int, token: str) -> bool:
        key = self._key(order_id)
        logger.info(f"Acquire lock {key}")
        #SET order:1:lock "<token>" NX EX 30
        return bool(self.redis.set(name=key, value=token, nx=True, ex=self.ttl))

    @redis_retry()
    def release_order_lock(self, order_id: int, token: str) -> bool:
        key = self._key(order_id)
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    @contextmanager
    def order_lock(self, order_id: int):
        token = uuid.uuid4().hex
        if not self.acquire_order_lock(order_id, token):
            raise ConcurrentModification(
                f"Zamowienie {order_id} jest wlasnie modyfikowane, sprobuj ponownie"
            )
        try:
            yield
        finally:
            try:
                self.release_order_lock(order_id, token)
            except redis.RedisError as e:
                # klucz i tak wygasnie po TTL
                logger.warning(f"Failed to release lock {self._key(order_id)}: {e}")
