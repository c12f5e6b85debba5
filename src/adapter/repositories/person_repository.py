from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.person_repository import IPersonRepository
from src.domain.entities import Person


class PersonRepository(IPersonRepository):
    """Person repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, person_id: int) -> Optional[Person]:
        result = await self.session.exec(select(Person).where(Person.id == person_id))
        return result.one_or_none()

    async def get_by_name(self, name: str) -> Optional[Person]:
        stmt = select(Person).where(Person.name == name).order_by(Person.id).limit(1)
        result = await self.session.exec(stmt)
        return result.first()

    async def create(self, person: Person) -> Person:
        self.session.add(person)
        await self.session.flush()
        await self.session.refresh(person)
        return person

    async def update(self, person: Person) -> Person:
        self.session.add(person)
        await self.session.flush()
        await self.session.refresh(person)
        return person

    async def delete(self, person: Person) -> None:
        await self.session.delete(person)
        await self.session.flush()
