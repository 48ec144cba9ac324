"""
User repository.

Data access layer for User model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from partnerconnector.models.user import User
from partnerconnector.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with hierarchy queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_admins(self) -> list[User]:
        """Get active admin users."""
        return await self.find_by(is_admin=True, is_active=True)
