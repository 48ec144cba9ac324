"""
Base service class.

Provides common functionality for all service classes including session
management, logging, and the transactional decorator.
"""

import functools
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from partnerconnector.utils.exceptions import CommissionError


T = TypeVar("T")


class BaseService:
    """
    Base service class.

    Provides common functionality for all service classes:
    - Session management
    - Logging with bound service context
    - Transaction helpers
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
        """
        self.session = session
        self.logger = logger.bind(service=self.__class__.__name__)

    async def commit(self) -> None:
        """Commit current transaction."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Rollback current transaction."""
        await self.session.rollback()


def transaction(
    func: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[T]]:
    """
    Decorator to wrap method in transaction with automatic commit/rollback.

    Commits on success, rolls back on exception. Domain errors are logged
    at warning level, anything else at error level with traceback.

    Usage:
        @transaction
        async def my_service_method(self, ...):
            # Your code here
            pass

    Args:
        func: Async method to wrap

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> T:
        try:
            result = await func(self, *args, **kwargs)
            await self.commit()
            return result
        except CommissionError as e:
            await self.rollback()
            self.logger.warning(
                f"Transaction rolled back in {func.__name__}: {e.message}",
                extra={"function": func.__name__, "code": e.code},
            )
            raise
        except Exception as e:
            await self.rollback()
            self.logger.error(
                f"Transaction failed in {func.__name__}",
                extra={
                    "error": str(e),
                    "function": func.__name__,
                },
                exc_info=True,
            )
            raise

    return wrapper
