"""Lazily connected Temporal client shared by the process."""

from loguru import logger
from temporalio.client import Client, TLSConfig
from temporalio.contrib.pydantic import pydantic_data_converter

from src.user_api.runtime.config.config_data import TemporalConfig
from src.user_api.runtime.context import get_config

CONNECT_ERRORS = (RuntimeError, OSError)


class TemporalClientService:
    """Connects on first use so startup never waits on the broker."""

    def __init__(self, config: TemporalConfig | None = None, max_attempts: int = 3):
        self._config = config or get_config().temporal
        self._max_attempts = max_attempts
        self._client: Client | None = None

    @property
    def is_enabled(self) -> bool:
        return self._config.enabled

    async def get_client(self) -> Client:
        """Return the shared client, connecting on the first call.

        Raises:
            RuntimeError: Temporal is disabled, or every connection attempt failed.
        """
        if not self.is_enabled:
            raise RuntimeError("Temporal is disabled in configuration")
        if self._client is None:
            self._client = await self._connect()
        return self._client

    async def _connect(self) -> Client:
        cfg = self._config
        log = logger.bind(url=cfg.url, namespace=cfg.namespace, tls=cfg.tls)
        error: Exception | None = None

        for attempt in range(1, self._max_attempts + 1):
            try:
                client = await Client.connect(
                    cfg.url,
                    namespace=cfg.namespace,
                    tls=TLSConfig() if cfg.tls else False,
                    data_converter=pydantic_data_converter,
                )
            except CONNECT_ERRORS as e:
                error = e
                log.bind(attempt=attempt, error_type=type(e).__name__).warning(
                    f"Temporal connection attempt {attempt}/{self._max_attempts} failed: {e}"
                )
                continue
            log.bind(attempt=attempt).info("Connected to Temporal")
            return client

        log.error(f"Giving up on Temporal after {self._max_attempts} attempts")
        raise RuntimeError(f"Could not connect to Temporal at {cfg.url}") from error

    async def health_check(self) -> bool:
        if not self.is_enabled:
            return False
        try:
            await self.get_client()
        except CONNECT_ERRORS as e:
            logger.bind(error_type=type(e).__name__).error(
                f"Temporal health check failed: {e}"
            )
            return False
        return True

    async def close(self) -> None:
        # The SDK client holds no resources beyond the reference
        self._client = None
