import uuid
from contextlib import contextmanager

import redis
from redis.exceptions import RedisError
from storefront.domain.errors import CartBusyError, PersistenceError
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, CART_LOCK_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nie mozna wcisnac sie miedzy GET a DEL
#dzieki temu zwalniamy tylko wlasny lock (token), nigdy cudzy ktory przejal klucz po TTL


class LockService:
    """
    -serializacja operacji na koszyku jednego uzytkownika (lock per user)
    -zwalnianie locka
    -atomowosc przy pomocy lua
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        if client is not None:
            self.redis = client
        else:
            self.redis = redis.Redis.from_url(
                url or REDIS_URL,
                decode_responses=True,
            )

    @staticmethod
    def _key(user_id: int) -> str:
        return f"cart:{user_id}:lock"

    @redis_retry()
    def acquire_cart_lock(self, user_id: int, token: str, ttl: int) -> bool:
        key = self._key(user_id)
        logger.info(f"Acquire lock {key} token {token}")
        #SET cart:1:lock "<token>" NX EX 10
        return bool(
            self.redis.set(
                name=key,
                value=token,
                nx=True, #tylko jesli klucz nie istnieje
                ex=ttl, #wygasa sam, nie trzeba recznie czyscic po crashu
            )
        )

    @redis_retry()
    def release_cart_lock(self, user_id: int, token: str) -> bool:
        key = self._key(user_id)
        logger.info(f"Release lock {key} token {token}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    @contextmanager
    def cart_lock(self, user_id: int, ttl: int = CART_LOCK_TTL_SECONDS):
        token = uuid.uuid4().hex
        try:
            locked = self.acquire_cart_lock(user_id, token, ttl)
        except RedisError as e:
            logger.error(f"Redis niedostepny przy blokowaniu koszyka {user_id}: {e}")
            raise PersistenceError("Serwis blokad jest niedostepny") from e

        if not locked:
            raise CartBusyError("Koszyk jest modyfikowany przez inna operacje, sprobuj ponownie")

        try:
            yield token
        finally:
            try:
                self.release_cart_lock(user_id, token)
            except RedisError as e:
                # lock i tak wygasnie po ttl
                logger.warning(f"Nie udalo sie zwolnic locka koszyka {user_id}: {e}")
