"""Email entity package."""

from .entity import Email
from .table import EmailTable

__all__ = ["Email", "EmailTable"]
