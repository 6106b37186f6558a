"""Authentication schemas."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class Token(BaseModel):
    """Token response schema."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class TokenData(BaseModel):
    """Token data schema for JWT payload."""
    user_id: Optional[UUID] = None
    jti: Optional[str] = None
