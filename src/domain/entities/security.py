"""
Security Entities

Profiles, permission grants and the transaction code table. Loaded once at
startup into the in-memory permission index and transaction router.
"""

from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint


class Profile(SQLModel, table=True):
    """Profile (role) a caller acts as"""

    __tablename__ = "profiles"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, max_length=100)


class Permission(SQLModel, table=True):
    """
    Permission grant - (profile, method, object) triple.

    Absence of a row means the call is denied.
    """

    __tablename__ = "permissions"

    id: Optional[int] = Field(default=None, primary_key=True)
    profile_id: int = Field(foreign_key="profiles.id", index=True)
    method_name: str = Field(max_length=100)
    object_name: str = Field(max_length=100)

    __table_args__ = (
        UniqueConstraint("profile_id", "method_name", "object_name", name="uq_permission"),
    )


class Transaction(SQLModel, table=True):
    """Transaction code - maps an opaque tx number to (object, method)"""

    __tablename__ = "transactions"

    tx_number: int = Field(primary_key=True)
    object_name: str = Field(max_length=100)
    method_name: str = Field(max_length=100)
