import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from src.adapter.services.logging_email_sender import LoggingEmailSender
from src.adapter.services.memory_rate_limiter import MemoryRateLimiter
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.errors import Errors
from src.app.handlers.auth_handler import AuthHandler
from src.app.handlers.person_handler import PersonHandler
from src.app.services.challenge_service import ChallengeService
from src.app.services.dispatch_gateway import DispatchGateway
from src.app.services.handler_registry import HandlerRegistry
from src.app.services.rate_limiter import RateLimitPolicy
from src.app.services.security_lifecycle import SecurityLifecycle
from src.domain.entities import BusinessObject
from .error import ClientError, ServerError, error_body
from .middleware import RequestLoggingMiddleware

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    logger.warning(f"Client error: {exc.base_error.code}")
    return JSONResponse(
        status_code=exc.status_code, content=error_body(exc.status_code, exc.base_error)
    )


async def handle_server_error(request: Request, exc: ServerError):
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, Errors.unknown_error()),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    alerts = []
    for item in exc.errors():
        location = ".".join(str(part) for part in item.get("loc", ()) if part != "body")
        alerts.append(f"{location or 'body'}: {item.get('msg')}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(status.HTTP_400_BAD_REQUEST, Errors.invalid_parameters(alerts)),
    )


async def load_security(app: FastAPI, session_factory) -> bool:
    """Load permissions and transaction codes into app.state.security"""
    async with session_factory() as session:
        return await app.state.security.start(
            lambda: SqlAlchemyUnitOfWork(session, app.state.config.SESSION_TABLE)
        )


def create_app(ApplicationConfig, session_factory=None, email_sender=None) -> FastAPI:
    if session_factory is None:
        from src.depends import AsyncSessionLocal

        session_factory = AsyncSessionLocal

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await load_security(app, session_factory)
        yield

    app = FastAPI(title=ApplicationConfig.APP_NAME, version="0.1.0", lifespan=lifespan)

    challenges = ChallengeService.from_config(ApplicationConfig)
    if email_sender is None:
        email_sender = LoggingEmailSender(ApplicationConfig.APP_NAME)
    registry = HandlerRegistry(
        {
            BusinessObject.person: PersonHandler,
            BusinessObject.auth: lambda: AuthHandler(challenges, email_sender, ApplicationConfig),
        }
    )
    app.state.config = ApplicationConfig
    app.state.challenges = challenges
    app.state.email_sender = email_sender
    app.state.security = SecurityLifecycle()
    app.state.rate_limiter = MemoryRateLimiter() if ApplicationConfig.RATE_LIMIT_ENABLED else None
    app.state.rate_limits = RateLimitPolicy.from_config(ApplicationConfig)
    app.state.gateway = DispatchGateway(
        app.state.security,
        registry,
        timeout_seconds=ApplicationConfig.STORE_TIMEOUT_SECONDS,
        rate_limiter=app.state.rate_limiter,
        rate_limits=app.state.rate_limits,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if ApplicationConfig.ENABLE_LOGGING_MIDDLEWARE:
        app.add_middleware(RequestLoggingMiddleware)

    from src.api.routes import auth, dispatch, health

    app.include_router(health.router, tags=["Health"])
    app.include_router(dispatch.router, tags=["Dispatch"])
    app.include_router(auth.router, tags=["Authentication"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    return app
