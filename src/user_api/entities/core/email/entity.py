"""Email domain entity."""

from pydantic import Field

from src.user_api.entities.core._base import Entity


class Email(Entity):
    """An address owned by a user."""

    user_id: str = Field(description="Identifier of the owning user")
    email: str = Field(description="Email address")
