from typing import Optional

from sqlalchemy import select

from ruleadmin.models.user import User
from ruleadmin.repositories.base import BaseRepository


class UserRepository(BaseRepository):
    """Encapsulates queries against the ``users`` table."""

    async def get_by_email(self, email: str) -> Optional[User]:
        """Return the user with *email* (already lower-cased), or ``None``."""
        result = await self._db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create(self, email: str, password_hash: str) -> User:
        user = User(email=email, password_hash=password_hash)
        self._db.add(user)
        await self._db.flush()
        return user
