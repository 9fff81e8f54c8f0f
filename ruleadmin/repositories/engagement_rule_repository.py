from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import delete, select

from ruleadmin.models.engagement_rule import EngagementRule
from ruleadmin.repositories.base import BaseRepository


class EngagementRuleRepository(BaseRepository):
    """Encapsulates every SQL query that touches the ``engagement_rules`` table.

    Methods here never commit; the versioning service owns the transaction
    boundary so that closing a version and inserting its successor land in
    the same commit.
    """

    async def list_rules(
        self, *, latest_only: bool, active_only: bool
    ) -> List[EngagementRule]:
        """Return rules ordered by event name, newest version first."""
        query = select(EngagementRule)
        if latest_only:
            query = query.where(EngagementRule.is_latest == 1)
        if active_only:
            query = query.where(EngagementRule.is_active == 1)
        query = query.order_by(
            EngagementRule.event_name.asc(), EngagementRule.version.desc()
        )
        result = await self._db.execute(query)
        return list(result.scalars().all())

    async def get_latest(
        self, event_name: str, *, for_update: bool = False
    ) -> Optional[EngagementRule]:
        """Return the latest version of *event_name*, or ``None``.

        With *for_update* the row is locked until the transaction ends
        (PostgreSQL), serialising concurrent updates of the same chain.
        """
        query = select(EngagementRule).where(
            EngagementRule.event_name == event_name,
            EngagementRule.is_latest == 1,
        )
        if for_update:
            query = query.with_for_update()
        result = await self._db.execute(query)
        return result.scalar_one_or_none()

    async def get_history(self, event_name: str) -> List[EngagementRule]:
        """Return every version of *event_name*, newest first."""
        result = await self._db.execute(
            select(EngagementRule)
            .where(EngagementRule.event_name == event_name)
            .order_by(EngagementRule.version.desc())
        )
        return list(result.scalars().all())

    async def create(self, **kwargs: Any) -> EngagementRule:
        """Insert a new version record and return the model instance."""
        rule = EngagementRule(**kwargs)
        self._db.add(rule)
        await self._db.flush()
        return rule

    async def close_version(self, rule: EngagementRule, closed_at: datetime) -> None:
        """Mark *rule* as historical and flush so the latest slot is free."""
        rule.is_latest = 0
        rule.valid_to = closed_at
        rule.updated_at = closed_at
        await self._db.flush()

    async def delete_chain(self, event_name: str) -> int:
        """Delete all versions of *event_name*; return the number removed."""
        result = await self._db.execute(
            delete(EngagementRule).where(EngagementRule.event_name == event_name)
        )
        return result.rowcount or 0
