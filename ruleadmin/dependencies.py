import logging

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ruleadmin.core.config import settings
from ruleadmin.core.context import RequestContext
from ruleadmin.core.database import get_db
from ruleadmin.core.exceptions import NotAuthenticatedError
from ruleadmin.services.auth_service import AuthService
from ruleadmin.services.rule_versioning import RuleVersioningService

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Repository factory functions (one per repository, each gets the shared db)
# ---------------------------------------------------------------------------


async def get_rule_repo(
    db: AsyncSession = Depends(get_db),
):
    from ruleadmin.repositories.engagement_rule_repository import (
        EngagementRuleRepository,
    )

    return EngagementRuleRepository(db)


async def get_user_repo(
    db: AsyncSession = Depends(get_db),
):
    from ruleadmin.repositories.user_repository import UserRepository

    return UserRepository(db)


async def get_session_repo(
    db: AsyncSession = Depends(get_db),
):
    from ruleadmin.repositories.session_repository import SessionRepository

    return SessionRepository(db)


# ---------------------------------------------------------------------------
# Service factory functions
# ---------------------------------------------------------------------------


async def get_auth_service(
    user_repo=Depends(get_user_repo),
    session_repo=Depends(get_session_repo),
) -> AuthService:
    return AuthService(user_repo=user_repo, session_repo=session_repo)


async def get_rule_service(
    rule_repo=Depends(get_rule_repo),
) -> RuleVersioningService:
    """Build a :class:`RuleVersioningService` with injected repository."""
    return RuleVersioningService(rule_repo=rule_repo)


# ---------------------------------------------------------------------------
# Request context
# ---------------------------------------------------------------------------


def get_session_token(request: Request) -> str | None:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


async def get_request_context(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> RequestContext:
    """Resolve the session cookie into a :class:`RequestContext`.

    FastAPI caches dependency results per request, so the session is
    looked up once and the same context reaches every consumer.  Raises
    :class:`NotAuthenticatedError` (401) when the cookie is missing,
    unknown, or expired.
    """
    token = get_session_token(request)
    if not token:
        raise NotAuthenticatedError()
    ctx = await auth_service.resolve_session(token)
    if ctx is None:
        logger.info("Rejected unknown or expired session on %s", request.url.path)
        raise NotAuthenticatedError("Session expired or invalid")
    return ctx
