import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.jwt import verify_jwt
from src.app.errors import Errors
from src.app.handlers.base import Caller, RequestContext
from src.app.services.dispatch_gateway import DispatchGateway
from src.app.services.security_lifecycle import SecurityLifecycle
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

logger = logging.getLogger(__name__)

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session, ApplicationConfig.SESSION_TABLE)


def _login_required() -> ClientError:
    return ClientError(Errors.login_required(), status_code=401)


async def get_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> Caller:
    """
    Resolve who the request acts as.

    Without a bearer token the caller is the public profile (None when
    PUBLIC_PROFILE_ID is 0). A bearer token must verify and reference an
    active session; the session's profile is used for permission checks.

    Raises:
        ClientError: 401 LOGIN_REQUIRED if the token or its session is invalid
    """
    if credentials is None:
        return Caller(profile_id=ApplicationConfig.PUBLIC_PROFILE_ID or None)

    payload = verify_jwt(credentials.credentials)
    if payload is None:
        raise _login_required()

    try:
        user_id = UUID(str(payload["user_id"]))
        session_id = UUID(str(payload["session_id"]))
    except (KeyError, ValueError):
        raise _login_required()

    async with uow:
        session = await uow.sessions.get_by_id(session_id)
        if (
            session is None
            or session.revoked
            or session.user_id != user_id
            or session.expires_at <= utcnow()
        ):
            raise _login_required()
        profile_id = session.profile_id

    return Caller(profile_id=profile_id, user_id=user_id, session_id=session_id)


def get_request_context(request: Request) -> RequestContext:
    """Server-side request facts handed to business handlers"""
    return RequestContext(
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        request_id=getattr(request.state, "request_id", None),
    )


def get_security(request: Request) -> SecurityLifecycle:
    return request.app.state.security


def get_gateway(request: Request) -> DispatchGateway:
    return request.app.state.gateway


def rate_limit(action: str):
    """
    Dependency enforcing LOGIN_RATE_LIMIT per client ip for an auth route.

    Raises:
        ClientError: 429 TOO_MANY_REQUESTS once the budget is spent
    """

    async def check(request: Request) -> None:
        limiter = request.app.state.rate_limiter
        if limiter is None:
            return
        ip = request.client.host if request.client else None
        key, rule = request.app.state.rate_limits.login_rule(action, ip)
        result = await limiter.hit(key, rule)
        if not result.allowed:
            logger.info(f"Rate limit exceeded for /{action}")
            raise ClientError(Errors.rate_limited(), status_code=429)

    return check
