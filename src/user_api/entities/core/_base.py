import uuid
from datetime import datetime, tzinfo

import sqlalchemy as sa
from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic import Field as PydanticField
from pydantic.alias_generators import to_camel
from sqlmodel import Field, SQLModel


def localize(value: datetime, zone: tzinfo | None) -> datetime:
    """Express ``value`` in ``zone``.

    Naive values are wall-clock times that were written in ``zone`` by
    backends that drop the offset (SQLite).
    """
    if zone is None:
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value.astimezone(zone)


class Entity(BaseModel):
    """Base entity class with auto-generated UUID identifier.

    Serialised with camelCase keys (``createdAt``, ``userId``). Pass
    ``context={"tz": zone}`` to ``model_validate`` to express timestamps in
    the configured time zone.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str = PydanticField(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique identifier for the entity",
    )

    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    @field_validator("created_at", "updated_at", "deleted_at")
    @classmethod
    def _apply_time_zone(cls, value: datetime | None, info: ValidationInfo) -> datetime | None:
        if value is None or not info.context:
            return value
        return localize(value, info.context.get("tz"))


class EntityTable(SQLModel, table=False):
    """Base table with a UUID primary key and lifecycle timestamps.

    Timestamps are stamped by the repository in the configured time zone.
    """

    id: str = Field(
        primary_key=True,
        max_length=36,
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique identifier for the entity",
    )

    created_at: datetime = Field(sa_type=sa.DateTime(timezone=True), nullable=False)
    updated_at: datetime = Field(sa_type=sa.DateTime(timezone=True), nullable=False)
    deleted_at: datetime | None = Field(
        default=None, sa_type=sa.DateTime(timezone=True), nullable=True, index=True
    )
