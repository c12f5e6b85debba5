from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.audit_event_repository import AuditEventRepository
from src.adapter.repositories.one_time_code_repository import OneTimeCodeRepository
from src.adapter.repositories.password_reset_repository import PasswordResetRepository
from src.adapter.repositories.person_repository import PersonRepository
from src.adapter.repositories.security_repository import SecurityRepository
from src.adapter.repositories.session_repository import SessionRepository
from src.adapter.repositories.user_device_repository import UserDeviceRepository
from src.adapter.repositories.user_repository import UserRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession, session_table: str = "sessions"):
        self.session = session
        self.session_table = session_table

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.users = UserRepository(self.session)
        self.sessions = SessionRepository(self.session, self.session_table)
        self.user_devices = UserDeviceRepository(self.session)
        self.password_resets = PasswordResetRepository(self.session)
        self.one_time_codes = OneTimeCodeRepository(self.session)
        self.security = SecurityRepository(self.session)
        self.persons = PersonRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
