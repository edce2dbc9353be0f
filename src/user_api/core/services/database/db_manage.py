"""Schema management and seed data."""

from datetime import datetime, tzinfo

from loguru import logger
from sqlalchemy import Engine
from sqlmodel import Session, SQLModel

from src.user_api.entities.core.email import EmailTable
from src.user_api.entities.core.user import UserTable

SEED_USERS = (
    {
        "id": "09123ae8-cce2-4d40-aac1-ae1b3c51cc77",
        "name": "Andrea Adam",
        "emails": (
            ("092fa1d6-aea8-4a0d-86d1-1c242d0f8ce5", "mrandreid.business@gmail.com"),
            (
                "902872a1-3c73-4fc5-8b9a-269203209d68",
                "andrea.adam.306147@brilian.bri.co.id",
            ),
        ),
    },
    {
        "id": "7f5abfff-fae9-4c0d-8433-50f650583dac",
        "name": "Zelda Skyward",
        "emails": (
            ("61e5efb6-5da0-470f-a3ee-1109a2ea590e", "zelda.skyward@email.com"),
        ),
    },
)


class DbManageService:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_all(self) -> None:
        """Create all database tables."""
        SQLModel.metadata.create_all(
            self._engine, tables=[UserTable.__table__, EmailTable.__table__]
        )
        logger.info("Database initialized with tables.")

    def drop_all(self) -> None:
        """Drop every table this service manages."""
        SQLModel.metadata.drop_all(
            self._engine, tables=[EmailTable.__table__, UserTable.__table__]
        )
        logger.info("Database tables dropped.")

    def seed(self, time_zone: tzinfo) -> int:
        """Insert the seed users that are not present yet.

        Returns:
            Number of users inserted.
        """
        inserted = 0
        with Session(self._engine) as session:
            for seed in SEED_USERS:
                if session.get(UserTable, seed["id"]) is not None:
                    logger.debug("Seed user {} already present", seed["id"])
                    continue

                now = datetime.now(time_zone)
                user = UserTable(
                    id=seed["id"], name=seed["name"], created_at=now, updated_at=now
                )
                for position, (email_id, address) in enumerate(seed["emails"]):
                    user.emails.append(
                        EmailTable(
                            id=email_id,
                            user_id=seed["id"],
                            email=address,
                            position=position,
                            created_at=now,
                            updated_at=now,
                        )
                    )
                session.add(user)
                inserted += 1

            session.commit()

        logger.info("Seeded {} user(s)", inserted)
        return inserted
