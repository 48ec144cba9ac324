"""
Admin audit log repository.

Data access layer for AdminAuditLog model.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from partnerconnector.models.admin_audit_log import AdminAuditLog
from partnerconnector.repositories.base import BaseRepository


class AdminAuditLogRepository(BaseRepository[AdminAuditLog]):
    """Audit log repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize audit log repository."""
        super().__init__(AdminAuditLog, session)

    async def log(
        self,
        actor_id: int | None,
        action: str,
        entity_type: str,
        entity_id: int | str,
        details: dict[str, Any] | None = None,
    ) -> AdminAuditLog:
        """
        Append an audit entry in the current transaction.

        Args:
            actor_id: Admin or partner performing the action
            action: Action name (e.g. "approve_payment")
            entity_type: Entity kind (e.g. "payment")
            entity_id: Entity identifier
            details: JSON-serializable details

        Returns:
            Created audit entry
        """
        return await self.create(
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            details=details,
        )

    async def get_for_entity(
        self, entity_type: str, entity_id: int | str
    ) -> list[AdminAuditLog]:
        """Get audit entries for an entity, oldest first."""
        stmt = (
            select(AdminAuditLog)
            .where(
                AdminAuditLog.entity_type == entity_type,
                AdminAuditLog.entity_id == str(entity_id),
            )
            .order_by(AdminAuditLog.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

