"""FastAPI dependencies for authentication and authorization."""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import structlog

from kaamlink_backend.core.database import get_db
from kaamlink_backend.core.error_handling import AuthenticationError, AuthorizationError
from kaamlink_backend.models.profile import Profile, ProfileRole
from kaamlink_backend.repositories.profile import ProfileRepository
from .utils import verify_token

logger = structlog.get_logger(__name__)

security = HTTPBearer(auto_error=False)

profile_repository = ProfileRepository()


def get_current_profile(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> Profile:
    """Get the caller's profile from the bearer token.

    Raises:
        AuthenticationError: Missing or invalid token, or unknown profile
    """
    if not credentials:
        logger.warning("No credentials provided")
        raise AuthenticationError("Could not validate credentials")

    token_data = verify_token(credentials.credentials)
    if token_data is None or token_data.user_id is None:
        raise AuthenticationError("Could not validate credentials")

    profile = profile_repository.get_by_id(db, token_data.user_id)
    if profile is None:
        logger.warning("Profile not found", user_id=str(token_data.user_id))
        raise AuthenticationError("Could not validate credentials")

    return profile


def require_role(role: ProfileRole):
    """Dependency factory restricting an endpoint to one profile role."""

    def check_role(current: Profile = Depends(get_current_profile)) -> Profile:
        if current.role != role.value:
            logger.warning(
                "Role access denied",
                user_id=str(current.user_id),
                role=current.role,
                required_role=role.value
            )
            raise AuthorizationError(f"Only {role.value}s can do this")
        return current

    return check_role


get_current_worker = require_role(ProfileRole.WORKER)
get_current_contractor = require_role(ProfileRole.CONTRACTOR)


def ensure_application_party(application, profile: Profile, contractor_only: bool = False) -> None:
    """Raise unless the profile is the application's worker or contractor."""
    allowed = {application.contractor_id}
    if not contractor_only:
        allowed.add(application.worker_id)
    if profile.user_id not in allowed:
        logger.warning(
            "Application access denied",
            user_id=str(profile.user_id),
            application_id=str(application.id)
        )
        raise AuthorizationError("Not a party to this application")
