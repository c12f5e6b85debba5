"""
PasswordReset Entity

Password recovery challenges.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utcnow


class PasswordReset(SQLModel, table=True):
    """
    PasswordReset entity - a link token plus a short code sent by email.

    Business Rules:
    - token_hash locates the record, code_hash is the secret being guessed
    - Only SHA-256 hashes are stored, never the raw secrets
    - At most one active (unused, unexpired) record per user
    - Terminal once used_at is set or expires_at passes
    - attempt_count only grows; it is capped by the password reset policy
    """

    __tablename__ = "password_resets"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", index=True)
    token_hash: str = Field(max_length=64, unique=True)  # SHA-256 output
    code_hash: str = Field(max_length=64)
    sent_to: str = Field(max_length=320)

    attempt_count: int = Field(default=0)
    used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime, nullable=True))

    request_ip: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_password_reset_expires_at", "expires_at"),
        Index("idx_password_reset_user_id", "user_id"),
    )

    @property
    def consumed_at(self) -> Optional[datetime]:
        return self.used_at
