"""Email database table model."""

from typing import TYPE_CHECKING

from sqlmodel import Field, Relationship

from src.user_api.entities.core._base import EntityTable

if TYPE_CHECKING:
    from src.user_api.entities.core.user.table import UserTable


class EmailTable(EntityTable, table=True):
    """Database persistence model for email addresses.

    Addresses are not unique at storage level; duplicates are rejected per
    request by the user service.
    """

    __tablename__ = "emails"

    user_id: str = Field(
        foreign_key="users.id", ondelete="CASCADE", index=True, max_length=36
    )
    email: str = Field(max_length=255)
    position: int = Field(default=0, description="Order within the owner's email set")

    user: "UserTable" = Relationship(back_populates="emails")
