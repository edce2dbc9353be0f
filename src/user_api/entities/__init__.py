"""Entities module with entity-centric structure.

Each entity has its own package containing:
- entity.py: Domain model returned to callers
- table.py: Database persistence model
- repository.py: Data access layer (where the entity has one)

Importing this package registers every table with the SQLModel metadata.
"""

from .core.email import Email, EmailTable
from .core.user import User, UserRepository, UserTable

__all__ = [
    "Email",
    "EmailTable",
    "User",
    "UserRepository",
    "UserTable",
]
