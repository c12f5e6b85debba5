from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities import Person


class IPersonRepository(ABC):
    """Person repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, person_id: int) -> Optional[Person]:
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[Person]:
        pass

    @abstractmethod
    async def create(self, person: Person) -> Person:
        pass

    @abstractmethod
    async def update(self, person: Person) -> Person:
        pass

    @abstractmethod
    async def delete(self, person: Person) -> None:
        pass
