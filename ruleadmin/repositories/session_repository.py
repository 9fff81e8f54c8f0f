from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, select

from ruleadmin.models.session import UserSession
from ruleadmin.models.user import User
from ruleadmin.repositories.base import BaseRepository


class SessionRepository(BaseRepository):
    """Encapsulates queries against the ``user_sessions`` table."""

    async def get_active(
        self, token: str, now: datetime
    ) -> Optional[Tuple[UserSession, User]]:
        """Return the unexpired session for *token* joined to its user.

        Expiry is compared in SQL so the check does not depend on how the
        driver returns timezone information.
        """
        result = await self._db.execute(
            select(UserSession, User)
            .join(User, UserSession.user_id == User.id)
            .where(UserSession.token == token, UserSession.expires_at > now)
        )
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    async def create(
        self, token: str, user_id: UUID, expires_at: datetime
    ) -> UserSession:
        session = UserSession(token=token, user_id=user_id, expires_at=expires_at)
        self._db.add(session)
        await self._db.flush()
        return session

    async def delete_for_user(self, user_id: UUID) -> None:
        """Remove every session belonging to *user_id*."""
        await self._db.execute(
            delete(UserSession).where(UserSession.user_id == user_id)
        )

    async def delete_token(self, token: str) -> None:
        await self._db.execute(delete(UserSession).where(UserSession.token == token))
