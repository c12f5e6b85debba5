from datetime import timedelta
from typing import Tuple

from src.api.utils.jwt import generate_jwt
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditEvent, Session, User


async def open_session(
    uow: UnitOfWork, user: User, ttl_days: int, details: dict
) -> Tuple[Session, str]:
    """
    Create the server-side session for a successful login and sign its
    access token. The caller commits.
    """
    now = utcnow()
    session = Session(
        user_id=user.id,
        profile_id=user.profile_id,
        expires_at=now + timedelta(days=ttl_days),
    )
    await uow.sessions.create(session)
    await uow.users.touch_last_login(user.id, now)

    await uow.audit_events.create(
        AuditEvent(
            user_id=user.id,
            profile_id=user.profile_id,
            action="login",
            event_metadata={"session_id": str(session.id), **details},
        )
    )

    return session, generate_jwt(user.id, session.id, user.profile_id)
