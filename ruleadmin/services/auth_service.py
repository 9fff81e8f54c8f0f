import logging
from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError

from ruleadmin.core.config import settings
from ruleadmin.core.constants import PASSWORD_MAX_LENGTH, PASSWORD_MIN_LENGTH
from ruleadmin.core.context import RequestContext
from ruleadmin.core.exceptions import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    ValidationError,
)
from ruleadmin.core.security import hash_password, new_session_token, verify_password
from ruleadmin.models.base import utcnow
from ruleadmin.models.user import User
from ruleadmin.repositories.session_repository import SessionRepository
from ruleadmin.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Accounts and cookie sessions.

    A user holds at most one session: opening a new one removes any
    previous token for the same user.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        session_repo: SessionRepository,
        session_max_age_seconds: Optional[int] = None,
    ) -> None:
        self._users = user_repo
        self._sessions = session_repo
        self._max_age = timedelta(
            seconds=session_max_age_seconds or settings.SESSION_MAX_AGE_SECONDS
        )

    # ------------------------------------------------------------------
    # Session store
    # ------------------------------------------------------------------

    async def resolve_session(self, token: Optional[str]) -> Optional[RequestContext]:
        """Return the identity behind *token*, or ``None`` if unknown/expired."""
        if not token:
            return None
        row = await self._sessions.get_active(token, utcnow())
        if row is None:
            return None
        session, user = row
        return RequestContext(
            user_id=user.id,
            email=user.email,
            token=session.token,
            expires_at=session.expires_at,
        )

    async def create_session(self, user: User) -> RequestContext:
        """Open a fresh session for *user*, replacing any existing one."""
        token = new_session_token()
        expires_at = utcnow() + self._max_age
        await self._sessions.delete_for_user(user.id)
        await self._sessions.create(token=token, user_id=user.id, expires_at=expires_at)
        await self._sessions.commit()
        return RequestContext(
            user_id=user.id, email=user.email, token=token, expires_at=expires_at
        )

    async def delete_session(self, token: Optional[str]) -> None:
        if not token:
            return
        await self._sessions.delete_token(token)
        await self._sessions.commit()

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_credentials(email: str, password: str) -> Tuple[str, str]:
        email = (email or "").strip().lower()
        if not email or "@" not in email:
            raise ValidationError("Please provide a valid email")
        if len(password or "") < PASSWORD_MIN_LENGTH:
            raise ValidationError(
                f"Password needs to be at least {PASSWORD_MIN_LENGTH} characters long"
            )
        if len(password) > PASSWORD_MAX_LENGTH:
            raise ValidationError(
                f"Password cannot exceed {PASSWORD_MAX_LENGTH} characters"
            )
        return email, password

    async def register(self, email: str, password: str) -> User:
        """Create an account without opening a session."""
        email, password = self._validate_credentials(email, password)
        if await self._users.get_by_email(email) is not None:
            raise EmailAlreadyRegisteredError()
        try:
            user = await self._users.create(
                email=email, password_hash=hash_password(password)
            )
            await self._users.commit()
        except IntegrityError as exc:
            await self._users.rollback()
            raise EmailAlreadyRegisteredError() from exc
        logger.info("Registered user %s", email)
        return user

    async def signup(self, email: str, password: str) -> RequestContext:
        user = await self.register(email, password)
        return await self.create_session(user)

    async def login(self, email: str, password: str) -> RequestContext:
        email = (email or "").strip().lower()
        user = await self._users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Failed login for %s", email)
            raise InvalidCredentialsError()
        ctx = await self.create_session(user)
        logger.info("User %s logged in", email)
        return ctx

    async def logout(self, token: Optional[str]) -> None:
        """Drop the session behind *token*; a missing token is a no-op."""
        ctx = await self.resolve_session(token)
        await self.delete_session(token)
        if ctx is not None:
            logger.info("User %s logged out", ctx.email)
