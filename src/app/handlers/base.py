"""
Business Handler Contract

Handlers are the business objects reachable through transaction codes.
They hold only process-wide collaborators (config, services) and receive
all per-call state through HandlerContext, so one instance per object is
shared safely across requests.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, ClassVar, Dict, Optional
from uuid import UUID

from pydantic import BaseModel

from src.app.services.unit_of_work import UnitOfWork
from src.core.result import Result
from src.domain.entities import BusinessObject


@dataclass(frozen=True)
class Caller:
    """Identity a request acts as"""

    profile_id: Optional[int]
    user_id: Optional[UUID] = None
    session_id: Optional[UUID] = None

    @property
    def is_authenticated(self) -> bool:
        return self.session_id is not None


@dataclass(frozen=True)
class RequestContext:
    """Server-derived request facts; never taken from the client body"""

    ip: Optional[str] = None
    user_agent: Optional[str] = None
    request_id: Optional[str] = None

    def as_meta(self) -> Dict[str, Optional[str]]:
        return {"ip": self.ip, "user_agent": self.user_agent}


@dataclass(frozen=True)
class HandlerContext:
    uow: UnitOfWork
    caller: Caller
    request: RequestContext


class HandlerResponse(BaseModel):
    """Successful handler outcome: HTTP-style code, message and optional data"""

    code: int = 200
    msg: str
    data: Optional[Any] = None


Operation = Callable[[Any, HandlerContext], Awaitable[Result[HandlerResponse]]]


class BusinessHandler(ABC):
    """
    Base class for business objects.

    Subclasses set object_name and list their callable operations in
    ``operations`` (method name -> coroutine function taking
    ``(self, params, ctx)``). Nothing outside that mapping is callable
    through a transaction code.
    """

    object_name: ClassVar[BusinessObject]
    operations: ClassVar[Dict[str, Callable[..., Awaitable[Result[HandlerResponse]]]]] = {}
