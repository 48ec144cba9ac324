"""
Commission notifications.

Each notification kind is its own frozen dataclass. Notifications are
best-effort: they are dispatched after the payment transaction commits and
a delivery failure is logged, never raised.
"""

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, ClassVar, Protocol

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from partnerconnector.models.enums import NotificationType
from partnerconnector.repositories.notification_repository import (
    NotificationRepository,
)


@dataclass(frozen=True)
class CommissionApprovalEvent:
    """A split was created and waits for admin approval."""

    type: ClassVar[NotificationType] = NotificationType.COMMISSION_APPROVAL

    user_id: int
    deal_id: int
    business_name: str | None
    level: int
    amount: Decimal
    percentage: Decimal
    currency: str

    @property
    def title(self) -> str:
        return "Commission awaiting approval"

    @property
    def message(self) -> str:
        return (
            f"Your level {self.level} commission of {self.amount} "
            f"{self.currency} ({self.percentage}%) for "
            f"{self.business_name or 'your deal'} is awaiting approval."
        )


@dataclass(frozen=True)
class CommissionApprovedEvent:
    """A commission share was approved."""

    type: ClassVar[NotificationType] = NotificationType.COMMISSION_APPROVED

    user_id: int
    deal_id: int
    business_name: str | None
    level: int
    amount: Decimal
    currency: str

    @property
    def title(self) -> str:
        return "Commission approved"

    @property
    def message(self) -> str:
        return (
            f"Your commission of {self.amount} {self.currency} for "
            f"{self.business_name or 'your deal'} has been approved."
        )


@dataclass(frozen=True)
class CommissionPaidEvent:
    """A commission share was paid out."""

    type: ClassVar[NotificationType] = NotificationType.COMMISSION_PAID

    user_id: int
    deal_id: int
    business_name: str | None
    amount: Decimal
    currency: str
    transfer_reference: str

    @property
    def title(self) -> str:
        return "Commission paid"

    @property
    def message(self) -> str:
        return (
            f"{self.amount} {self.currency} for "
            f"{self.business_name or 'your deal'} has been paid "
            f"(reference {self.transfer_reference})."
        )


@dataclass(frozen=True)
class StatusUpdateEvent:
    """Payment or deal status changed outside the happy path."""

    type: ClassVar[NotificationType] = NotificationType.STATUS_UPDATE

    user_id: int
    deal_id: int | None
    entity: str
    status: str
    notes: str | None = None

    @property
    def title(self) -> str:
        return f"{self.entity.capitalize()} status updated"

    @property
    def message(self) -> str:
        text = f"The {self.entity} status is now {self.status.replace('_', ' ')}."
        if self.notes:
            text = f"{text} Notes: {self.notes}"
        return text


NotificationEvent = (
    CommissionApprovalEvent
    | CommissionApprovedEvent
    | CommissionPaidEvent
    | StatusUpdateEvent
)


def event_payload(event: NotificationEvent) -> dict[str, Any]:
    """Serialize event fields to JSON-safe values (Decimal as string)."""
    return {
        key: str(value) if isinstance(value, Decimal) else value
        for key, value in asdict(event).items()
    }


class NotificationDispatcher(Protocol):
    """Delivers a notification event to its user."""

    async def dispatch(self, event: NotificationEvent) -> None: ...


class DatabaseNotificationDispatcher:
    """
    Stores notifications as in-app notification rows.

    Uses its own session per event so a failure cannot touch the caller's
    transaction.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize dispatcher.

        Args:
            session_maker: Factory for independent sessions
        """
        self.session_maker = session_maker

    async def dispatch(self, event: NotificationEvent) -> None:
        """Persist a notification row and commit it."""
        async with self.session_maker() as session:
            repo = NotificationRepository(session)
            await repo.create(
                user_id=event.user_id,
                type=event.type.value,
                title=event.title,
                message=event.message,
                deal_id=event.deal_id,
                payload=event_payload(event),
            )
            await session.commit()

        logger.debug(
            "Notification stored",
            extra={"user_id": event.user_id, "type": event.type.value},
        )


async def emit_safely(
    dispatcher: NotificationDispatcher | None,
    events: Iterable[NotificationEvent],
) -> bool:
    """
    Dispatch events, logging failures instead of raising.

    Args:
        dispatcher: Notification dispatcher, None disables delivery
        events: Events to send

    Returns:
        True if every event was delivered
    """
    if dispatcher is None:
        return True

    delivered = True
    for event in events:
        try:
            await dispatcher.dispatch(event)
        except Exception as e:
            delivered = False
            logger.warning(
                "Failed to send commission notification",
                extra={
                    "user_id": event.user_id,
                    "type": event.type.value,
                    "error": str(e),
                },
            )

    return delivered
