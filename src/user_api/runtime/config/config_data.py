"""Typed view of the ``config`` section of ``config.yaml``.

Each nested model mirrors one block of the file. Values come from the YAML
after placeholder substitution and are coerced and validated here.
"""

from __future__ import annotations

from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger
from pydantic import BaseModel, Field, computed_field, field_validator
from sqlalchemy.engine import make_url

Environment = Literal["development", "production", "test"]


class CORSConfig(BaseModel):
    origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default_factory=lambda: ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default_factory=lambda: ["*"])


class PaginationConfig(BaseModel):
    """Defaults applied by the list/query engine."""

    default_limit: int = Field(
        default=10, gt=0, description="Rows per page when the request gives none"
    )
    max_limit: int = Field(
        default=100, gt=0, description="Upper bound for a requested page size"
    )


class TemporalConfig(BaseModel):
    enabled: bool = False
    url: str = Field(default="localhost:7233", description="Frontend host:port")
    namespace: str = "default"
    task_queue: str = "user-api"
    tls: bool = False


class RedisConfig(BaseModel):
    """Optional cache; only its readiness is checked by the API."""

    enabled: bool = False
    url: str = Field(default="", description="redis:// or rediss:// URL")
    password: str | None = Field(
        default=None, description="Injected into the URL unless it already has credentials"
    )
    decode_responses: bool = True
    max_connections: int = Field(default=20, gt=0)
    socket_timeout: float = Field(default=5.0, description="Seconds")
    socket_connect_timeout: float = Field(default=5.0, description="Seconds")

    @computed_field
    @property
    def connection_string(self) -> str:
        scheme, sep, rest = self.url.partition("://")
        if not self.password or not sep or "@" in rest:
            return self.url
        return f"{scheme}://:{self.password}@{rest}"

    @property
    def sanitized_connection_string(self) -> str:
        """Connection string with the password masked, for log lines."""
        if not self.password:
            return self.connection_string
        return self.connection_string.replace(self.password, "***")


class ObjectStorageConfig(BaseModel):
    """S3 compatible bucket; leave ``endpoint_url`` empty for AWS itself."""

    enabled: bool = False
    endpoint_url: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    region: str = "us-east-1"
    bucket: str = "user-api"
    use_ssl: bool = False


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Minimum level for every sink")
    format: Literal["json", "plain"] = Field(
        default="json", description="Format of the file sink"
    )
    file: str = Field(default="logs/app.log", description="Empty disables the file sink")
    max_size_mb: int = Field(default=10, gt=0, description="Rotate after this size")
    backup_count: int = Field(default=5, ge=0, description="Rotated files kept")


class DatabaseConfig(BaseModel):
    url: str = Field(
        default="sqlite:///./database.db", description="SQLAlchemy database URL"
    )
    password: str | None = Field(
        default=None, description="Replaces the URL password for server databases"
    )
    echo: bool = False
    pool_size: int = Field(default=20, gt=0)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout: int = Field(default=30, gt=0, description="Seconds")
    pool_recycle: int = Field(default=1800, description="Seconds")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @computed_field
    @property
    def connection_string(self) -> str:
        """URL handed to SQLAlchemy, with ``password`` applied when set."""
        if self.is_sqlite or not self.password:
            return self.url

        parsed = make_url(self.url)
        if parsed.password and parsed.password != self.password:
            logger.warning("database.password overrides the password in database.url")
        return parsed.set(password=self.password).render_as_string(hide_password=False)


class AppConfig(BaseModel):
    name: str = "User CRUD API"
    version: str = "v1.0.0"
    environment: Environment = "development"
    host: str = "localhost"
    port: int = Field(default=8000, gt=0, lt=65536)
    location: str = Field(
        default="Asia/Jakarta", description="IANA zone applied to every timestamp"
    )
    debug: bool = False
    maintenance_flag_file: str = Field(
        default="storages/maintenance.flag",
        description="While this file exists every request gets a 503",
    )
    cors: CORSConfig = Field(default_factory=CORSConfig)

    @field_validator("location")
    @classmethod
    def _known_zone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone '{value}'") from e
        return value

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def time_zone(self) -> ZoneInfo:
        return ZoneInfo(self.location)


class ConfigData(BaseModel):
    """Root of the ``config`` section."""

    app: AppConfig = Field(default_factory=AppConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    temporal: TemporalConfig = Field(default_factory=TemporalConfig)
    object_storage: ObjectStorageConfig = Field(default_factory=ObjectStorageConfig)
