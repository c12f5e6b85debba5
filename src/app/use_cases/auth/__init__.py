"""
Authentication Use Cases

Registration, email verification, password reset and login.
"""

from .register_use_case import RegisterUseCase
from .request_email_verification_use_case import RequestEmailVerificationUseCase
from .verify_email_use_case import VerifyEmailUseCase
from .request_password_reset_use_case import RequestPasswordResetUseCase
from .verify_password_reset_use_case import VerifyPasswordResetUseCase
from .confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from .login_use_case import LoginUseCase
from .verify_login_challenge_use_case import VerifyLoginChallengeUseCase
from .logout_use_case import LogoutUseCase
from .dtos import (
    ChallengeCommand,
    EmailCommand,
    IdentifierCommand,
    LoginCommand,
    LoginResponse,
    RegisterCommand,
    RegisterResponse,
    ResetPasswordCommand,
    ResetPasswordResponse,
    StatusResponse,
)

__all__ = [
    # Use Cases
    "RegisterUseCase",
    "RequestEmailVerificationUseCase",
    "VerifyEmailUseCase",
    "RequestPasswordResetUseCase",
    "VerifyPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    "LoginUseCase",
    "VerifyLoginChallengeUseCase",
    "LogoutUseCase",
    # DTOs - Commands
    "RegisterCommand",
    "EmailCommand",
    "IdentifierCommand",
    "ChallengeCommand",
    "ResetPasswordCommand",
    "LoginCommand",
    # DTOs - Responses
    "StatusResponse",
    "RegisterResponse",
    "ResetPasswordResponse",
    "LoginResponse",
]
