"""
Logout Use Case

Revokes the session behind the caller's access token.
"""

from src.app.errors import Errors
from src.app.handlers.base import Caller
from src.app.services.unit_of_work import UnitOfWork
from src.core.result import Result, Return
from src.domain.entities import AuditEvent
from .dtos import StatusResponse


class LogoutUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, caller: Caller) -> Result[StatusResponse]:
        if not caller.is_authenticated:
            return Return.err(Errors.login_required())

        async with self.uow:
            await self.uow.sessions.revoke_by_id(caller.session_id)
            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=caller.user_id,
                    profile_id=caller.profile_id,
                    action="logout",
                    event_metadata={"session_id": str(caller.session_id)},
                )
            )
            await self.uow.commit()

        return Return.ok(StatusResponse(status="logged_out", message="Session revoked"))
