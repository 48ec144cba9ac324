"""
Partner hierarchy resolution.

Walks parent_partner_id links to find the upline that shares a deal's
commission, and maintains links between partners.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from partnerconnector.models.user import User
from partnerconnector.repositories.user_repository import UserRepository
from partnerconnector.services.base_service import BaseService, transaction
from partnerconnector.services.commission.config import (
    COMMISSION_DEPTH,
    MAX_PARTNER_LEVEL,
)
from partnerconnector.utils.exceptions import (
    HierarchyIntegrityError,
    NotFoundError,
)


@dataclass(frozen=True)
class ChainLink:
    """A partner in a commission chain and its level (0 = deal owner)."""

    user_id: int
    level: int


class HierarchyResolver(BaseService):
    """Resolves and maintains the partner hierarchy."""

    def __init__(
        self,
        session: AsyncSession,
        user_repo: UserRepository | None = None,
    ) -> None:
        """Initialize hierarchy resolver."""
        super().__init__(session)
        self.user_repo = user_repo or UserRepository(session)

    async def resolve_chain(
        self, user_id: int, depth: int = COMMISSION_DEPTH
    ) -> list[ChainLink]:
        """
        Get the commission chain starting at a partner.

        Level 0 is the partner itself, level 1 its parent, level 2 its
        grandparent. A parent already seen in the walk is a data-integrity
        problem: it is logged and treated as the end of the chain. The same
        applies to a parent id pointing at a missing user.

        Args:
            user_id: Partner at level 0 (deal referrer)
            depth: Number of levels to return

        Returns:
            Chain links ordered by level

        Raises:
            NotFoundError: Starting partner does not exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("Partner not found", user_id=user_id)

        chain = [ChainLink(user_id=user.id, level=0)]
        visited = {user.id}
        current = user

        while len(chain) < depth and current.parent_partner_id is not None:
            parent_id = current.parent_partner_id

            if parent_id in visited:
                self.logger.warning(
                    "Referral loop detected in partner hierarchy",
                    extra={
                        "user_id": user_id,
                        "looping_parent_id": parent_id,
                        "chain_ids": [link.user_id for link in chain],
                    },
                )
                break

            parent = await self.user_repo.get_by_id(parent_id)
            if parent is None:
                self.logger.warning(
                    "Parent partner reference points to missing user",
                    extra={"user_id": current.id, "parent_partner_id": parent_id},
                )
                break

            chain.append(ChainLink(user_id=parent.id, level=len(chain)))
            visited.add(parent.id)
            current = parent

        self.logger.debug(
            "Commission chain resolved",
            extra={
                "user_id": user_id,
                "depth": depth,
                "chain_length": len(chain),
            },
        )

        return chain

    async def calculate_partner_level(self, user_id: int) -> int:
        """
        Calculate partner depth in the hierarchy.

        Args:
            user_id: Partner ID

        Returns:
            1 for a root partner, plus one per ancestor, capped at 3
        """
        chain = await self.resolve_chain(user_id, depth=MAX_PARTNER_LEVEL)
        return len(chain)

    @transaction
    async def link_partner(self, user_id: int, parent_id: int) -> User:
        """
        Attach a partner to the partner who referred them.

        Only the linked partner's level is recomputed; levels of its
        existing downline are left as stored.

        Args:
            user_id: Partner being linked
            parent_id: Referring partner

        Returns:
            Updated user

        Raises:
            HierarchyIntegrityError: Self-link or link that closes a cycle
            NotFoundError: Either user does not exist
        """
        if user_id == parent_id:
            raise HierarchyIntegrityError(
                "A partner cannot refer themselves", user_id=user_id
            )

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("Partner not found", user_id=user_id)

        parent = await self.user_repo.get_by_id(parent_id)
        if parent is None:
            raise NotFoundError("Referring partner not found", user_id=parent_id)

        ancestor_ids = await self._ancestor_ids(parent)
        if user_id in ancestor_ids:
            self.logger.warning(
                "Rejected partner link that would create a loop",
                extra={
                    "user_id": user_id,
                    "parent_id": parent_id,
                    "chain_ids": ancestor_ids,
                },
            )
            raise HierarchyIntegrityError(
                "Link would create a circular partner hierarchy",
                user_id=user_id,
                parent_id=parent_id,
            )

        parent_level = min(len(ancestor_ids), MAX_PARTNER_LEVEL)
        user.parent_partner_id = parent.id
        user.partner_level = min(parent_level + 1, MAX_PARTNER_LEVEL)
        await self.session.flush()

        self.logger.info(
            "Partner linked to upline",
            extra={
                "user_id": user_id,
                "parent_id": parent_id,
                "partner_level": user.partner_level,
            },
        )

        return user

    async def _ancestor_ids(self, user: User) -> list[int]:
        """
        Collect ids from user up through every ancestor.

        Stops at the first repeated id so an existing loop cannot hang
        the walk.
        """
        ids = [user.id]
        current = user
        while current.parent_partner_id is not None:
            if current.parent_partner_id in ids:
                break
            parent = await self.user_repo.get_by_id(current.parent_partner_id)
            if parent is None:
                break
            ids.append(parent.id)
            current = parent
        return ids
