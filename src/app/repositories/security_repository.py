from abc import ABC, abstractmethod
from typing import List

from src.domain.entities import Permission, Transaction


class ISecurityRepository(ABC):
    """Read-only access to the permission and transaction tables"""

    @abstractmethod
    async def list_permissions(self) -> List[Permission]:
        """All permission grants"""
        pass

    @abstractmethod
    async def list_transactions(self) -> List[Transaction]:
        """All transaction code mappings"""
        pass

    @abstractmethod
    async def ping(self) -> None:
        """Cheap round-trip used by the readiness probe"""
        pass
