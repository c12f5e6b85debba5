"""
Dispatch Gateway

Runs one transaction request: validate shape, resolve the tx code, check
the caller's permission, resolve the handler and invoke it.
"""

import asyncio
import logging
import math
from typing import Any, List, Optional, Tuple

from src.app.errors import Errors
from src.app.handlers.base import Caller, HandlerContext, HandlerResponse, RequestContext
from src.app.services.handler_registry import HandlerRegistry, HandlerResolutionError
from src.app.services.rate_limiter import RateLimit, RateLimiter, RateLimitPolicy
from src.app.services.security_lifecycle import SecurityLifecycle
from src.app.services.tx_router import TxRoute, parse_tx
from src.app.services.unit_of_work import UnitOfWork
from src.app.utils.redact import redact_secrets
from src.core.result import Result, Return
from src.domain.entities import AuditEvent

logger = logging.getLogger(__name__)


def validate_dispatch_body(body: Any) -> List[str]:
    """
    Shape check for ``{tx, params?}``.

    Returns a list of alerts, empty when the body is acceptable.
    """
    if not isinstance(body, dict):
        return ["body must be an object"]

    alerts = []
    if parse_tx(body.get("tx")) is None:
        alerts.append("tx must be a positive integer")

    params = body.get("params")
    if params is not None:
        is_number = isinstance(params, (int, float)) and not isinstance(params, bool)
        if is_number and not math.isfinite(params):
            is_number = False
        if not (isinstance(params, str) or is_number or isinstance(params, dict)):
            alerts.append("params must be a string, a number or an object")

    return alerts


class DispatchGateway:
    """
    Per-request state machine, terminal on the first error:

    0. security must be READY (SERVICE_UNAVAILABLE) and the caller must
       carry a profile (LOGIN_REQUIRED)
    1. per-caller dispatch budget -> TOO_MANY_REQUESTS
    2. validate shape -> INVALID_PARAMETERS with alerts
    3. resolve route -> NOT_FOUND; public Auth budgets -> TOO_MANY_REQUESTS
    4. authorize -> UNAUTHORIZED
    5. resolve handler -> UNKNOWN_ERROR
    6. invoke; handler Results pass through, exceptions become UNKNOWN_ERROR

    No retries, and nothing is locked across the handler call.
    """

    def __init__(
        self,
        security: SecurityLifecycle,
        registry: HandlerRegistry,
        timeout_seconds: Optional[float] = None,
        ready_wait_seconds: float = 5.0,
        rate_limiter: Optional[RateLimiter] = None,
        rate_limits: Optional[RateLimitPolicy] = None,
    ):
        self.security = security
        self.registry = registry
        self.timeout_seconds = timeout_seconds
        self.ready_wait_seconds = ready_wait_seconds
        self.rate_limiter = rate_limiter
        self.rate_limits = rate_limits or RateLimitPolicy()

    async def dispatch(
        self,
        body: Any,
        caller: Caller,
        request: RequestContext,
        uow: UnitOfWork,
    ) -> Result[HandlerResponse]:
        if not self.security.is_ready:
            if not await self.security.wait_ready(self.ready_wait_seconds):
                return Return.err(Errors.service_unavailable())

        if caller.profile_id is None:
            return Return.err(Errors.login_required())

        if await self._rate_limited(self.rate_limits.dispatch_rule(caller, request)):
            logger.info("Dispatch rate limit exceeded")
            return Return.err(Errors.rate_limited())

        alerts = validate_dispatch_body(body)
        if alerts:
            return Return.err(Errors.invalid_parameters(alerts))

        tx = body["tx"]
        params = body.get("params")

        route = self.security.router.resolve(tx)
        if route is None:
            logger.info(f"Unknown transaction code: {tx}")
            return Return.err(Errors.not_found("Transaction not found"))

        if await self._rate_limited(self.rate_limits.auth_rule(route, params, request)):
            logger.info(f"Rate limit exceeded for tx {tx} ({route.key})")
            return Return.err(Errors.rate_limited())

        if not self.security.permissions.is_allowed(
            caller.profile_id, route.method_name, route.object_name
        ):
            await self._audit(uow, caller, "tx_denied", tx, route, {"reason": "permissionDenied"})
            return Return.err(Errors.unauthorized())

        try:
            operation = self.registry.resolve(route.object_name, route.method_name)
        except HandlerResolutionError as e:
            logger.error(f"Handler resolution failed for tx {tx} ({route.key}): {e.reason}")
            return Return.err(Errors.unknown_error())

        ctx = HandlerContext(uow=uow, caller=caller, request=request)
        try:
            if self.timeout_seconds:
                result = await asyncio.wait_for(operation(params, ctx), self.timeout_seconds)
            else:
                result = await operation(params, ctx)
        except asyncio.TimeoutError:
            logger.error(f"Handler timed out for tx {tx} ({route.key})")
            return Return.err(Errors.unknown_error())
        except Exception as e:
            logger.exception(
                f"Handler failed for tx {tx} ({route.key}): {type(e).__name__}",
                extra={"request_id": request.request_id},
            )
            logger.debug(f"Failed tx {tx} params: {redact_secrets(params)}")
            return Return.err(Errors.unknown_error())

        outcome = result.error.code if result.is_err() else result.value.code
        await self._audit(uow, caller, "tx_exec", tx, route, {"outcome": outcome})
        return result

    async def _rate_limited(self, rule: Optional[Tuple[str, RateLimit]]) -> bool:
        if self.rate_limiter is None or rule is None:
            return False
        key, limit = rule
        result = await self.rate_limiter.hit(key, limit)
        return not result.allowed

    async def _audit(
        self,
        uow: UnitOfWork,
        caller: Caller,
        action: str,
        tx: int,
        route: TxRoute,
        details: dict,
    ) -> None:
        """Best-effort audit trail; failures are logged and never change the response"""
        try:
            async with uow:
                await uow.audit_events.create(
                    AuditEvent(
                        user_id=caller.user_id,
                        profile_id=caller.profile_id,
                        action=action,
                        event_metadata={
                            "tx": tx,
                            "object_name": route.object_name,
                            "method_name": route.method_name,
                            **details,
                        },
                    )
                )
                await uow.commit()
        except Exception as e:
            logger.warning(f"Audit write failed for {action} {route.key}: {type(e).__name__}")
