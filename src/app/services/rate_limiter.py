"""
Rate Limiting

Request budgets per key over a sliding window. The policy turns a request
(route, params, caller, ip) into a key and a rule; the limiter counts hits.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from src.app.handlers.base import Caller, RequestContext
from src.app.services.tx_router import TxRoute
from src.domain.entities import BusinessObject


@dataclass(frozen=True)
class RateLimit:
    limit: int
    window_seconds: int


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    retry_after: Optional[int] = None


class RateLimiter(ABC):
    @abstractmethod
    async def hit(self, key: str, rule: RateLimit) -> RateLimitResult:
        """Count one request against key. Rejected requests are not counted."""
        pass


# Public Auth operations and their per-window budgets
DEFAULT_AUTH_LIMITS = {
    "register": 5,
    "requestEmailVerification": 5,
    "verifyEmail": 10,
    "requestPasswordReset": 5,
    "verifyPasswordReset": 10,
    "resetPassword": 10,
}

# Operations whose scalar params value is the keyed field
_SCALAR_FIELDS = {
    "requestEmailVerification": "email",
    "requestPasswordReset": "identifier",
}

_TOKEN_PREFIX = 16


def _lower(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip().lower()
    return None


def _param(params: Any, method_name: str, name: str) -> Optional[str]:
    if isinstance(params, dict):
        return _lower(params.get(name))
    if _SCALAR_FIELDS.get(method_name) == name:
        return _lower(params)
    return None


def _key(prefix: str, **parts: Optional[str]) -> str:
    return ":".join([prefix] + [f"{name}:{value}" for name, value in parts.items() if value])


class RateLimitPolicy:
    """
    Which budget a request falls under.

    - every dispatch: DISPATCH_RATE_LIMIT per user (or per ip when anonymous)
    - public Auth operations: AUTH_RATE_LIMITS per ip and the targeted
      account (email, identifier or the leading characters of the token)
    - /login and /login/verify: LOGIN_RATE_LIMIT per ip
    """

    def __init__(
        self,
        window_seconds: int = 60,
        dispatch_limit: int = 120,
        login_limit: int = 10,
        auth_limits: Optional[Mapping[str, int]] = None,
    ):
        if window_seconds <= 0:
            raise ValueError("Rate limit window must be positive")
        self.window_seconds = window_seconds
        self.dispatch_limit = dispatch_limit
        self.login_limit = login_limit
        self.auth_limits: Dict[str, int] = dict(DEFAULT_AUTH_LIMITS)
        self.auth_limits.update(auth_limits or {})

    @classmethod
    def from_config(cls, config) -> "RateLimitPolicy":
        return cls(
            window_seconds=config.RATE_LIMIT_WINDOW_SECONDS,
            dispatch_limit=config.DISPATCH_RATE_LIMIT,
            login_limit=config.LOGIN_RATE_LIMIT,
            auth_limits=config.AUTH_RATE_LIMITS,
        )

    def _rule(self, limit: int) -> RateLimit:
        return RateLimit(limit=limit, window_seconds=self.window_seconds)

    def dispatch_rule(self, caller: Caller, request: RequestContext) -> Tuple[str, RateLimit]:
        if caller.user_id is not None:
            key = _key("dispatch", user=str(caller.user_id))
        else:
            key = _key("dispatch", ip=request.ip or "unknown")
        return key, self._rule(self.dispatch_limit)

    def auth_rule(
        self, route: TxRoute, params: Any, request: RequestContext
    ) -> Optional[Tuple[str, RateLimit]]:
        """Budget for a public Auth operation, None for everything else"""
        method = route.method_name
        if route.object_name != BusinessObject.auth.value or method not in self.auth_limits:
            return None

        prefix = f"auth:{method}"
        ip = request.ip or "unknown"
        if method == "register":
            key = _key(
                prefix,
                ip=ip,
                email=_param(params, method, "email"),
                user=_param(params, method, "username"),
            )
        elif method == "requestEmailVerification":
            key = _key(prefix, ip=ip, email=_param(params, method, "email"))
        elif method == "requestPasswordReset":
            key = _key(prefix, ip=ip, id=_param(params, method, "identifier"))
        else:
            token = _param(params, method, "token")
            key = _key(prefix, ip=ip, token=token[:_TOKEN_PREFIX] if token else None)
        return key, self._rule(self.auth_limits[method])

    def login_rule(self, action: str, ip: Optional[str]) -> Tuple[str, RateLimit]:
        return _key(f"login:{action}", ip=ip or "unknown"), self._rule(self.login_limit)
