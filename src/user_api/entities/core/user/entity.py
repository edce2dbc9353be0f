"""User domain entity."""

from pydantic import Field

from src.user_api.entities.core._base import Entity
from src.user_api.entities.core.email.entity import Email


class User(Entity):
    """User entity representing a person in the system.

    This is the domain model returned to callers. Its ``emails`` reflect
    exactly the addresses stored for the user.
    """

    name: str = Field(description="Display name")
    emails: list[Email] = Field(default_factory=list, description="Owned addresses")
