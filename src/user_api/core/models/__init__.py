"""Request models for the HTTP endpoints."""

from .user import (
    CreateUserRequest,
    DeleteUserRequest,
    PaginatorRequest,
    ReadUserRequest,
    UpdateUserBody,
    UpdateUserRequest,
)

__all__ = [
    "CreateUserRequest",
    "DeleteUserRequest",
    "PaginatorRequest",
    "ReadUserRequest",
    "UpdateUserBody",
    "UpdateUserRequest",
]
