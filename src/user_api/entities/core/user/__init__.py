"""User entity package.

- User: Domain entity
- UserTable: Database persistence model
- UserRepository: Transactional data access layer
"""

from .entity import User
from .repository import CreateUserData, ReadUserData, UpdateUserData, UserRepository
from .table import UserTable

__all__ = [
    "CreateUserData",
    "ReadUserData",
    "UpdateUserData",
    "User",
    "UserRepository",
    "UserTable",
]
