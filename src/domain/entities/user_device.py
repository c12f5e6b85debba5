"""
UserDevice Entity

Devices trusted after a successful login step-up.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utcnow


class UserDevice(SQLModel, table=True):
    """
    UserDevice entity - a hashed device token that skips the login challenge.
    """

    __tablename__ = "user_devices"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", index=True)
    device_token_hash: str = Field(max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)
    ip: Optional[str] = Field(default=None, max_length=64)

    last_seen_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_device_user_token", "user_id", "device_token_hash", unique=True),)
