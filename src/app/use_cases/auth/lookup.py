from typing import Optional

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import User


async def find_user(uow: UnitOfWork, identifier: str) -> Optional[User]:
    """Resolve a login/reset identifier: an email when it contains "@", else a username"""
    identifier = identifier.strip()
    if "@" in identifier:
        return await uow.users.get_by_email(identifier.lower())
    return await uow.users.get_by_username(identifier)
