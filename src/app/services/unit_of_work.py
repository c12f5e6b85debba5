from abc import ABC, abstractmethod

from src.app.repositories.audit_event_repository import IAuditEventRepository
from src.app.repositories.one_time_code_repository import IOneTimeCodeRepository
from src.app.repositories.password_reset_repository import IPasswordResetRepository
from src.app.repositories.person_repository import IPersonRepository
from src.app.repositories.security_repository import ISecurityRepository
from src.app.repositories.session_repository import ISessionRepository
from src.app.repositories.user_device_repository import IUserDeviceRepository
from src.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    sessions: ISessionRepository
    user_devices: IUserDeviceRepository
    password_resets: IPasswordResetRepository
    one_time_codes: IOneTimeCodeRepository
    security: ISecurityRepository
    persons: IPersonRepository
    audit_events: IAuditEventRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
