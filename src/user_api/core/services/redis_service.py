"""Optional Redis cache client with a ping based health check."""

import redis.asyncio as redis_async
from loguru import logger
from redis.backoff import ExponentialBackoff
from redis.exceptions import RedisError
from redis.retry import Retry

from src.user_api.runtime.config.config_data import RedisConfig
from src.user_api.runtime.context import get_config


def build_client(config: RedisConfig) -> redis_async.Redis:
    return redis_async.from_url(
        config.connection_string,
        encoding="utf-8",
        decode_responses=config.decode_responses,
        max_connections=config.max_connections,
        socket_timeout=config.socket_timeout,
        socket_connect_timeout=config.socket_connect_timeout,
        health_check_interval=30,
        retry=Retry(ExponentialBackoff(base=1, cap=10), retries=3),
        client_name="user_api",
    )


class RedisService:
    """Holds the cache client when ``redis.enabled`` is set and a URL is given.

    Without both, the service stays inert and every call is a no-op.
    """

    def __init__(self, config: RedisConfig | None = None):
        config = config or get_config().redis
        self._client: redis_async.Redis | None = None

        if config.enabled and not config.url:
            logger.warning("redis.enabled is set but redis.url is empty; cache disabled")
        elif config.enabled:
            logger.info(f"Connecting to Redis at {config.sanitized_connection_string}")
            self._client = build_client(config)
        else:
            logger.debug("Redis cache disabled")

    @property
    def is_enabled(self) -> bool:
        return self._client is not None

    def get_client(self) -> redis_async.Redis | None:
        return self._client

    async def health_check(self) -> bool:
        if self._client is None:
            return False
        try:
            await self._client.ping()
        except (RedisError, OSError) as e:
            logger.bind(error_type=type(e).__name__).error(
                f"Redis health check failed: {e}"
            )
            return False
        return True

    async def close(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()
