"""
User Entity

Represents an account that can call the gateway.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utcnow


class User(SQLModel, table=True):
    """
    User entity - an account that authenticates and acts under a profile.

    Business Rules:
    - Email and username are unique across all users
    - Password stored as bcrypt hash
    - profile_id is the role used for permission checks
    - email_verified_at is set once an email verification challenge is consumed
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=320)
    username: str = Field(unique=True, index=True, max_length=64)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    profile_id: int = Field(foreign_key="profiles.id", index=True)

    email_verified_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime, nullable=True)
    )

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_user_profile", "profile_id"),)
