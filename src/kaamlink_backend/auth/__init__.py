"""Authentication and authorization module."""

from .dependencies import (
    get_current_profile,
    get_current_worker,
    get_current_contractor,
    require_role,
    ensure_application_party,
)
from .models import Token, TokenData
from .utils import create_access_token, verify_token

__all__ = [
    "get_current_profile",
    "get_current_worker",
    "get_current_contractor",
    "require_role",
    "ensure_application_party",
    "Token",
    "TokenData",
    "create_access_token",
    "verify_token",
]
