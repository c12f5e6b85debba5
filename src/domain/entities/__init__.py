"""
Gateway Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import BusinessObject, ChallengePurpose

# Export all entities
from .security import Permission, Profile, Transaction
from .user import User
from .session import Session
from .user_device import UserDevice
from .password_reset import PasswordReset
from .one_time_code import OneTimeCode
from .person import Person
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "BusinessObject",
    "ChallengePurpose",
    # Entities
    "Profile",
    "Permission",
    "Transaction",
    "User",
    "Session",
    "UserDevice",
    "PasswordReset",
    "OneTimeCode",
    "Person",
    "AuditEvent",
]
