"""
Authentication Use Case DTOs (Data Transfer Objects)

Commands validate business input coming from transaction params or HTTP
bodies; Responses are the structured outputs of the use cases.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from src.app.services.challenge_service import MAX_CODE_LENGTH, MIN_CODE_LENGTH

BCRYPT_MAX_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"must be at most {BCRYPT_MAX_BYTES} bytes")
    return value


# ============================================================================
# Commands
# ============================================================================


class RegisterCommand(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: EmailStr
    username: str = Field(min_length=3, max_length=64, pattern=r"^\S+$")
    password: str = Field(min_length=8, max_length=200)

    password_bytes = field_validator("password")(_check_password_bytes)


class EmailCommand(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: EmailStr


class IdentifierCommand(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    identifier: str = Field(min_length=3, max_length=320)


class ChallengeCommand(BaseModel):
    """Link token plus the code sent alongside it"""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    token: str = Field(min_length=16, max_length=256)
    code: str = Field(min_length=MIN_CODE_LENGTH, max_length=MAX_CODE_LENGTH)


class ResetPasswordCommand(ChallengeCommand):
    new_password: str = Field(min_length=8, max_length=200)

    password_bytes = field_validator("new_password")(_check_password_bytes)


class LoginCommand(BaseModel):
    model_config = ConfigDict(extra="ignore")

    identifier: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=200)
    device_token: Optional[str] = Field(default=None, max_length=256)


# ============================================================================
# Response DTOs
# ============================================================================


class StatusResponse(BaseModel):
    """Generic status/message response"""

    status: str
    message: str


class RegisterResponse(BaseModel):
    user_id: str
    status: str
    message: str


class ResetPasswordResponse(BaseModel):
    """
    status is "success", or "degraded" when the password changed but other
    sessions could not be invalidated
    """

    status: str
    message: str
    alerts: List[str] = Field(default_factory=list)


class LoginResponse(BaseModel):
    """
    status "authenticated" carries an access token; status
    "verification_required" carries the challenge token to continue with
    """

    status: str
    access_token: Optional[str] = None
    session_id: Optional[str] = None
    device_token: Optional[str] = None
    challenge_token: Optional[str] = None
    challenge_expires_at: Optional[datetime] = None
