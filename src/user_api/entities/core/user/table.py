"""User database table model."""

from sqlmodel import Field, Relationship

from src.user_api.entities.core._base import EntityTable
from src.user_api.entities.core.email.table import EmailTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    Owns its emails: removing an email from ``emails`` or deleting the user
    deletes the email rows. Emails keep the order they were submitted in.
    """

    __tablename__ = "users"

    name: str = Field(max_length=255, index=True)

    emails: list[EmailTable] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": [EmailTable.created_at, EmailTable.position],
        },
    )
