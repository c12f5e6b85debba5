"""
Gateway Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class ChallengePurpose(str, Enum):
    """What a one-time secret was issued for"""

    password_reset = "password_reset"
    email_verification = "email_verification"
    login = "login"


class BusinessObject(str, Enum):
    """Business objects reachable through transaction codes"""

    person = "Person"
    auth = "Auth"
