"""
User-Account Store

The contract the crisis pipeline depends on for user data, plus the
SQLAlchemy-backed implementation.

Every call opens and closes its own session; the pipeline never holds
a database connection while it waits on other collaborators.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from havyn.config.logging_config import get_logger
from havyn.domain.exceptions import UserNotFoundError
from havyn.domain.models.geo import GeoPoint, LocationRecord
from havyn.domain.models.user_account import UserAccount
from havyn.infrastructure.database.connection import DatabaseManager
from havyn.infrastructure.database.models.user_model import UserModel
from havyn.infrastructure.database.repositories.user_repository import UserRepository

logger = get_logger(__name__)


class UserAccountStore(ABC):
    """
    Read/write access to the user fields used by the crisis pipeline.

    Implementations may raise on infrastructure failure; callers in the
    pipeline catch and degrade.
    """

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[UserAccount]:
        """Get a user snapshot, or None if no record exists."""

    @abstractmethod
    async def set_cached_location(
        self,
        user_id: str,
        point: GeoPoint,
        updated_at: datetime,
    ) -> None:
        """
        Overwrite the cached location.

        Raises:
            UserNotFoundError: No record for user_id
        """

    async def get_cached_location(self, user_id: str) -> LocationRecord:
        """Get the cached location; empty when the user is unknown."""
        user = await self.get_user(user_id)
        if user is None:
            return LocationRecord.empty()
        return user.location


def to_user_account(model: UserModel) -> UserAccount:
    """Map an ORM row onto the domain snapshot."""
    return UserAccount(
        user_id=model.id,
        email=model.email,
        display_name=model.name,
        guardian_email=model.guardian_email,
        helpline_email=model.helpline_email,
        location=LocationRecord(
            point=GeoPoint.from_coordinates(model.last_known_lat, model.last_known_lng),
            updated_at=model.last_location_update,
        ),
    )


class SqlUserAccountStore(UserAccountStore):
    """
    UserAccountStore over the relational users table.

    Usage:
        store = SqlUserAccountStore(get_db_manager())
        user = await store.get_user("user-123")
    """

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def get_user(self, user_id: str) -> Optional[UserAccount]:
        async with self._db.session() as session:
            model = await UserRepository(session).get_by_id_or_email(user_id)
            if model is None:
                return None
            return to_user_account(model)

    async def set_cached_location(
        self,
        user_id: str,
        point: GeoPoint,
        updated_at: datetime,
    ) -> None:
        async with self._db.session() as session:
            updated = await UserRepository(session).update_location(
                user_id,
                lat=point.lat,
                lng=point.lng,
                updated_at=updated_at,
            )

        if not updated:
            raise UserNotFoundError(user_id)

        logger.debug("Cached location updated", user_id=user_id)
