"""Core services exports."""

from .database.db_manage import DbManageService
from .database.db_session import DbSessionService
from .redis_service import RedisService
from .storage.object_storage import ObjectStorageService
from .temporal.temporal_client import TemporalClientService
from .user.user_service import UserService

__all__ = [
    "DbManageService",
    "DbSessionService",
    "ObjectStorageService",
    "RedisService",
    "TemporalClientService",
    "UserService",
]
