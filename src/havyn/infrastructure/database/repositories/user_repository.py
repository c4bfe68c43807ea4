"""
User Repository

Data access for user accounts. Users are addressed by id or by
email, since chat sessions may only carry the latter.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from havyn.infrastructure.database.models.user_model import UserModel


def _matches(identifier: str):
    return or_(UserModel.id == identifier, UserModel.email == identifier)


class UserRepository:
    """
    Queries against the users table within one session.

    Usage:
        async with db.session() as session:
            user = await UserRepository(session).get_by_id_or_email("user-123")
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id_or_email(self, identifier: str) -> Optional[UserModel]:
        """
        Get a user whose id or email equals the identifier.

        Args:
            identifier: User id or email

        Returns:
            User if found, None otherwise
        """
        result = await self._session.execute(
            select(UserModel).where(_matches(identifier)).limit(1)
        )
        return result.scalars().first()

    async def update_location(
        self,
        identifier: str,
        lat: float,
        lng: float,
        updated_at: datetime,
    ) -> bool:
        """
        Overwrite the cached location (last write wins).

        Returns:
            True if a user row was updated
        """
        result = await self._session.execute(
            update(UserModel)
            .where(_matches(identifier))
            .values(
                last_known_lat=lat,
                last_known_lng=lng,
                last_location_update=updated_at,
            )
        )
        return result.rowcount > 0
