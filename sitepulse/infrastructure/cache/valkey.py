# ==============================================================================
# Valkey Session Cache
# ==============================================================================
"""
Valkey adapter for the expiring key-value port.

Values are JSON-encoded and written with ``SET key value EX ttl`` so Valkey
drops them on its own. Transient socket failures are retried by redis-py with
exponential backoff; anything else surfaces as a ``RedisError`` for the caller
to wrap.
"""

import json
import logging

import redis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry

from sitepulse.base import Cache
from sitepulse.utils.config import get_settings
from sitepulse.utils.retry import REDIS_RETRY_EXCEPTIONS, VALKEY_RETRIES

logger = logging.getLogger(__name__)

# Shorter timeout for one-off connectivity checks
CHECK_TIMEOUT_SECONDS = 5


class ValkeyCache(Cache):
    """
    JSON values with TTL on a Valkey (or Redis) server.

    Args:
        url: Connection URL, defaults to the configured Valkey URL
        socket_timeout: Connect and read timeout in seconds
        retries: Retries for transient socket errors (default: VALKEY_RETRIES)
    """

    def __init__(
        self,
        url: str | None = None,
        socket_timeout: int = 10,
        retries: int | None = None,
    ):
        self._url = url or get_settings().valkey.url
        self._client = redis.from_url(
            self._url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            retry=Retry(
                ExponentialBackoff(cap=32, base=1),
                retries=VALKEY_RETRIES if retries is None else retries,
            ),
            retry_on_error=list(REDIS_RETRY_EXCEPTIONS),
            health_check_interval=30,
        )

    def set(self, key: str, value: dict, ttl_seconds: int) -> None:
        self._client.set(key, json.dumps(value), ex=ttl_seconds)

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.warning("Valkey ping failed (%s): %s", self._url, e)
            return False

    def close(self) -> None:
        self._client.close()


def check_valkey_connection(url: str | None = None) -> bool:
    """Open a short-lived connection and PING it."""
    try:
        client = redis.from_url(
            url or get_settings().valkey.url,
            socket_timeout=CHECK_TIMEOUT_SECONDS,
            socket_connect_timeout=CHECK_TIMEOUT_SECONDS,
        )
        try:
            return bool(client.ping())
        finally:
            client.close()
    except redis.RedisError:
        return False
