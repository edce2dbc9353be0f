"""S3 compatible object storage client (AWS S3, MinIO)."""

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from src.user_api.runtime.config.config_data import ObjectStorageConfig
from src.user_api.runtime.context import get_config


class ObjectStorageService:
    def __init__(self, config: ObjectStorageConfig | None = None, client=None):
        self._config = config or get_config().object_storage
        self._client = client

        if self._config.enabled and self._client is None:
            logger.info(
                "Initializing object storage client",
                endpoint=self._config.endpoint_url or "aws",
                bucket=self._config.bucket,
            )
            self._client = boto3.client(
                "s3",
                endpoint_url=self._config.endpoint_url,
                aws_access_key_id=self._config.access_key_id,
                aws_secret_access_key=self._config.secret_access_key,
                region_name=self._config.region,
                use_ssl=self._config.use_ssl,
            )

    @property
    def is_enabled(self) -> bool:
        return self._config.enabled

    def get_client(self):
        return self._client if self._config.enabled else None

    def health_check(self) -> bool:
        """Check that the configured bucket is reachable."""
        if not self._config.enabled or self._client is None:
            return False

        try:
            self._client.head_bucket(Bucket=self._config.bucket)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Object storage health check failed",
                bucket=self._config.bucket,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False
