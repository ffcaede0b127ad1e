"""Repository for persisted decisions."""

from typing import Any, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.domain.decision import Decision
from app.repositories.base import BaseRepository


class DecisionRepository(BaseRepository[Decision]):
    """
    Repository for Decision records.

    The request_id unique constraint is the idempotency boundary:
    insert_if_absent never raises on a duplicate id.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Decision, db)

    async def get_by_request_id(self, request_id: str) -> Optional[Decision]:
        """Retrieve the decision stored for a request id."""
        return await self.find_one_by(request_id=request_id)

    async def get_recent(self, limit: int) -> List[Decision]:
        """Retrieve the most recent decisions, newest first."""
        stmt = (
            select(Decision)
            .order_by(Decision.timestamp.desc(), Decision.created_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def insert_if_absent(self, **values: Any) -> Tuple[Decision, bool]:
        """
        Atomically insert a decision unless one exists for the request id.

        Uses INSERT .. ON CONFLICT (request_id) DO NOTHING, then reads the
        row back. A writer that loses a race gets the winner's row.

        Args:
            **values: Column values, must include request_id

        Returns:
            Tuple of (stored decision, True if this call inserted it)
        """
        dialect = self.db.bind.dialect.name
        insert = pg_insert if dialect == "postgresql" else sqlite_insert

        stmt = (
            insert(Decision.__table__)
            .values(**values)
            .on_conflict_do_nothing(index_elements=["request_id"])
        )
        result = await self.db.execute(stmt)
        created = result.rowcount == 1
        await self.db.flush()

        stored = await self.get_by_request_id(values["request_id"])
        return stored, created
