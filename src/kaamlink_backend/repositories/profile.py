"""Profile repository for database operations."""

from kaamlink_backend.models.profile import Profile
from .base import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """Repository for Profile model operations."""

    def __init__(self):
        super().__init__(Profile)
