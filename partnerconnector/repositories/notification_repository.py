"""
Notification repository.

Data access layer for Notification model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from partnerconnector.models.notification import Notification
from partnerconnector.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Notification repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize notification repository."""
        super().__init__(Notification, session)

    async def get_for_user(self, user_id: int) -> list[Notification]:
        """Get notifications for a user, oldest first."""
        return await self.find_by(user_id=user_id)
