from fastapi import APIRouter, Depends, Request, Response

from ruleadmin.api.deps import get_auth_service, get_request_context, get_session_token
from ruleadmin.core.config import settings
from ruleadmin.core.context import RequestContext
from ruleadmin.core.rate_limit import limiter
from ruleadmin.schemas.auth import CredentialsRequest, CurrentUserOut
from ruleadmin.schemas.common import MessageResponse
from ruleadmin.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


def _set_session_cookie(response: Response, ctx: RequestContext) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=ctx.token,
        httponly=True,
        samesite="lax",
        secure=settings.FORCE_SECURE_COOKIES,
        path="/",
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        expires=ctx.expires_at,
    )


def _current_user(ctx: RequestContext) -> CurrentUserOut:
    return CurrentUserOut(
        user_id=ctx.user_id, email=ctx.email, expires_at=ctx.expires_at
    )


@router.post("/signup", response_model=CurrentUserOut, status_code=201)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def signup(
    request: Request,
    response: Response,
    credentials: CredentialsRequest,
    service: AuthService = Depends(get_auth_service),
) -> CurrentUserOut:
    """Create an account and open a session for it.

    Rate-limited per IP to slow down account enumeration.
    """
    ctx = await service.signup(credentials.email, credentials.password)
    _set_session_cookie(response, ctx)
    return _current_user(ctx)


@router.post("/login", response_model=CurrentUserOut)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    credentials: CredentialsRequest,
    service: AuthService = Depends(get_auth_service),
) -> CurrentUserOut:
    """Exchange credentials for a session cookie.

    Rate-limited per IP to slow down password guessing.
    """
    ctx = await service.login(credentials.email, credentials.password)
    _set_session_cookie(response, ctx)
    return _current_user(ctx)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    token: str | None = Depends(get_session_token),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await service.logout(token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=CurrentUserOut)
async def me(ctx: RequestContext = Depends(get_request_context)) -> CurrentUserOut:
    return _current_user(ctx)
