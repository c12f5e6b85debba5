"""
AuditEvent Entity

Immutable log of dispatch and authentication events.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from ..base import utcnow


class AuditEvent(SQLModel, table=True):
    """
    AuditEvent entity - immutable log of dispatch and authentication events.

    Business Rules:
    - Immutable (never updated or deleted)
    - user_id nullable for anonymous (public profile) calls
    - Metadata never holds raw params, passwords, tokens or codes
    """

    __tablename__ = "audit_events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: Optional[UUID] = Field(default=None, index=True)
    profile_id: Optional[int] = Field(default=None)

    action: str = Field(max_length=100)  # e.g., "tx_exec", "tx_denied", "login"
    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_audit_created_at", "created_at"),
        Index("idx_audit_user_id", "user_id"),
        Index("idx_audit_action", "action"),
    )
