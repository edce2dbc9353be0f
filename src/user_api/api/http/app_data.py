from dataclasses import dataclass

from src.user_api.core.services import (
    DbSessionService,
    ObjectStorageService,
    RedisService,
    TemporalClientService,
)


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    redis_service: RedisService
    temporal_service: TemporalClientService
    object_storage_service: ObjectStorageService

    @classmethod
    def from_config(cls, config) -> "ApplicationDependencies":
        return cls(
            database_service=DbSessionService(config),
            redis_service=RedisService(config.redis),
            temporal_service=TemporalClientService(config.temporal),
            object_storage_service=ObjectStorageService(config.object_storage),
        )

    async def close(self) -> None:
        await self.redis_service.close()
        await self.temporal_service.close()
        self.database_service.dispose()
