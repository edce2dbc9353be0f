"""Request models for the user endpoints.

Query and path values arrive as strings and are kept as strings here; the
user service converts them to their typed form.
"""

import re
import uuid

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

SAFE_TEXT = re.compile(r"""^[^'"\[\]<>{}]+$""")
DIGITS = re.compile(r"^[0-9]+$")
BOOL_WORDS = ("true", "false")


def check_safe_text(field: str, value: str) -> str:
    """Reject quotes, brackets and braces; the empty string is allowed."""
    if value and not SAFE_TEXT.match(value):
        raise ValueError(f"the {field} contains unsafe characters")
    return value


def check_email(value: str) -> str:
    """Validate an address without normalising it."""
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError("must be a valid email address") from e
    return value


def check_uuid(value: str) -> str:
    if not value:
        return value
    try:
        uuid.UUID(value)
    except ValueError as e:
        raise ValueError("must be a valid UUID") from e
    return value


class CreateUserRequest(BaseModel):
    name: str = Field(min_length=1, description="Display name")
    emails: list[str] = Field(min_length=1, description="Addresses owned by the user")

    @field_validator("name")
    @classmethod
    def _name_is_safe(cls, value: str) -> str:
        return check_safe_text("name", value)

    @field_validator("emails")
    @classmethod
    def _emails_are_valid(cls, value: list[str]) -> list[str]:
        return [check_email(item) for item in value]


class PaginatorRequest(BaseModel):
    """Paging query parameters in their raw string form."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: str = ""
    limit: str = ""
    order_by: str = Field(default="", description="id, name, createdAt or updatedAt")
    sort_by: str = Field(default="", description="asc or desc")
    search: str = ""
    disable_calculate_total: str = ""

    @field_validator("page", "limit")
    @classmethod
    def _digits_only(cls, value: str) -> str:
        if value and not DIGITS.match(value):
            raise ValueError("must contain digits only")
        return value

    @field_validator("search")
    @classmethod
    def _search_is_safe(cls, value: str) -> str:
        return check_safe_text("search", value)

    @field_validator("disable_calculate_total")
    @classmethod
    def _bool_word(cls, value: str) -> str:
        if value and value not in BOOL_WORDS:
            raise ValueError("must be a valid value")
        return value


class ReadUserRequest(PaginatorRequest):
    id: str = Field(default="", description="Exact user id filter")

    @field_validator("id")
    @classmethod
    def _id_is_uuid(cls, value: str) -> str:
        return check_uuid(value)


class UpdateUserBody(BaseModel):
    """Fields a PATCH may change. Empty values leave the stored data alone."""

    name: str = ""
    emails: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_is_safe(cls, value: str) -> str:
        return check_safe_text("name", value)

    @field_validator("emails")
    @classmethod
    def _emails_are_valid(cls, value: list[str]) -> list[str]:
        return [check_email(item) for item in value]


class UpdateUserRequest(UpdateUserBody):
    id: str = Field(min_length=1)

    @field_validator("id")
    @classmethod
    def _id_is_uuid(cls, value: str) -> str:
        return check_uuid(value)


class DeleteUserRequest(BaseModel):
    id: str = Field(min_length=1)

    @field_validator("id")
    @classmethod
    def _id_is_uuid(cls, value: str) -> str:
        return check_uuid(value)
