from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.user_device_repository import IUserDeviceRepository
from src.domain.base import utcnow
from src.domain.entities import UserDevice


class UserDeviceRepository(IUserDeviceRepository):
    """UserDevice repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: UUID, device_token_hash: str) -> Optional[UserDevice]:
        stmt = select(UserDevice).where(
            UserDevice.user_id == user_id,
            UserDevice.device_token_hash == device_token_hash,
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def trust(
        self,
        user_id: UUID,
        device_token_hash: str,
        user_agent: Optional[str],
        ip: Optional[str],
    ) -> UserDevice:
        device = await self.get(user_id, device_token_hash)
        if device is None:
            device = UserDevice(user_id=user_id, device_token_hash=device_token_hash)
        device.user_agent = user_agent
        device.ip = ip
        device.last_seen_at = utcnow()
        self.session.add(device)
        await self.session.flush()
        await self.session.refresh(device)
        return device

    async def touch(self, device: UserDevice) -> None:
        device.last_seen_at = utcnow()
        self.session.add(device)
        await self.session.flush()
