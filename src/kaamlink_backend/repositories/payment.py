"""Payment repository for database operations."""

from kaamlink_backend.models.payment import Payment
from .base import BaseRepository


class PaymentRepository(BaseRepository[Payment]):
    """Repository for Payment model operations."""

    def __init__(self):
        super().__init__(Payment)
