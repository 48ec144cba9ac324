"""
Deal repository.

Data access layer for Deal model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from partnerconnector.models.deal import Deal
from partnerconnector.models.enums import DealStage
from partnerconnector.repositories.base import BaseRepository


class DealRepository(BaseRepository[Deal]):
    """Deal repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize deal repository."""
        super().__init__(Deal, session)

    async def update_stage(self, deal_id: int, stage: DealStage) -> Deal | None:
        """
        Set deal pipeline stage.

        Transition rules are enforced by the caller.

        Args:
            deal_id: Deal ID
            stage: New stage

        Returns:
            Updated deal or None if not found
        """
        return await self.update(deal_id, deal_stage=stage.value)
