"""
OneTimeCode Entity

Short-lived codes for email verification and login step-up.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from ..base import utcnow


class OneTimeCode(SQLModel, table=True):
    """
    OneTimeCode entity - a hashed code scoped by (user_id, purpose), optionally
    located by a link token (purpose, token_hash).

    Business Rules:
    - Only SHA-256 hashes are stored
    - Issuing a new code consumes every active code for the same user and purpose
    - Terminal once consumed_at is set or expires_at passes
    - meta is opaque JSON (request context, flow data)
    """

    __tablename__ = "one_time_codes"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", index=True)
    purpose: str = Field(max_length=50)
    token_hash: Optional[str] = Field(default=None, max_length=64, index=True)
    code_hash: str = Field(max_length=64)
    meta: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    attempt_count: int = Field(default=0)
    consumed_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime, nullable=True)
    )

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_otp_user_purpose", "user_id", "purpose"),
        Index("idx_otp_purpose_token", "purpose", "token_hash"),
        Index("idx_otp_expires_at", "expires_at"),
    )
