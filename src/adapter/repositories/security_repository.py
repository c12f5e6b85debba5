from typing import List

from sqlalchemy import text
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.security_repository import ISecurityRepository
from src.domain.entities import Permission, Transaction


class SecurityRepository(ISecurityRepository):
    """Security tables repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_permissions(self) -> List[Permission]:
        result = await self.session.exec(select(Permission))
        return list(result.all())

    async def list_transactions(self) -> List[Transaction]:
        result = await self.session.exec(select(Transaction))
        return list(result.all())

    async def ping(self) -> None:
        await self.session.execute(text("SELECT 1"))
