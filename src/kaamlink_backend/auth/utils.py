"""Authentication utilities."""

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID, uuid4

from jose import JWTError, jwt
import structlog

from kaamlink_backend.core.config import settings
from .models import TokenData

logger = structlog.get_logger(__name__)


def create_access_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token whose subject is the profile's user id.

    Args:
        user_id: Profile user id
        expires_delta: Token expiration time

    Returns:
        Encoded JWT token
    """
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))

    to_encode = {
        "sub": str(user_id),
        "exp": expire,
        "jti": str(uuid4()),
        "iat": now,
    }
    encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)

    logger.debug("Access token created", user_id=str(user_id), expires_at=expire.isoformat())
    return encoded_jwt


def verify_token(token: str) -> Optional[TokenData]:
    """Verify and decode a JWT token.

    Returns:
        TokenData if valid, None otherwise
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.warning("Token verification failed", error=str(e))
        return None

    user_id_str = payload.get("sub")
    if user_id_str is None:
        logger.warning("Token missing user ID")
        return None

    try:
        user_id = UUID(user_id_str)
    except ValueError as e:
        logger.warning("Invalid UUID in token", error=str(e))
        return None

    return TokenData(user_id=user_id, jti=payload.get("jti"))
