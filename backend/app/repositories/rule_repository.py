"""Repository for decision rule definitions."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.domain.rule import RuleConfiguration
from app.repositories.base import BaseRepository


class RuleRepository(BaseRepository[RuleConfiguration]):
    """Repository for RuleConfiguration with priority-ordered queries."""

    def __init__(self, db: AsyncSession):
        super().__init__(RuleConfiguration, db)

    async def get_by_name(self, rule_name: str) -> Optional[RuleConfiguration]:
        """Retrieve a rule by its unique name."""
        return await self.find_one_by(rule_name=rule_name)

    async def get_active_rules(self) -> List[RuleConfiguration]:
        """
        Retrieve enabled rules in evaluation order.

        Ordered by ascending priority, ties broken by rule name so the
        order is stable between loads.

        Returns:
            List of enabled rules
        """
        stmt = (
            select(RuleConfiguration)
            .where(RuleConfiguration.enabled == True)  # noqa: E712
            .order_by(RuleConfiguration.priority, RuleConfiguration.rule_name)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_rules(
        self,
        enabled_only: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> List[RuleConfiguration]:
        """
        List rules ordered by priority.

        Args:
            enabled_only: If True, return only enabled rules
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List of rules
        """
        stmt = select(RuleConfiguration).order_by(
            RuleConfiguration.priority, RuleConfiguration.rule_name
        )
        if enabled_only:
            stmt = stmt.where(RuleConfiguration.enabled == True)  # noqa: E712
        stmt = stmt.offset(skip).limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())
