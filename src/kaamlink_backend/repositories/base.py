"""Base repository class with common CRUD operations."""

from typing import Generic, TypeVar, Type, Optional
from uuid import UUID

from sqlalchemy.orm import Session
from sqlalchemy.inspection import inspect
from sqlalchemy.exc import SQLAlchemyError
import structlog

from kaamlink_backend.core.base import Base
from kaamlink_backend.core.error_handling import PersistenceError

logger = structlog.get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository class with common CRUD operations.

    Write methods take ``commit``. With ``commit=False`` the change is only
    flushed so a service can group several writes into one transaction and
    commit (or roll back) once.
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model

    @property
    def _pk(self):
        return inspect(self.model).primary_key[0]

    def create(self, db: Session, commit: bool = True, **kwargs) -> ModelType:
        """Create a new record.

        Raises:
            PersistenceError: If the write fails
        """
        try:
            instance = self.model(**kwargs)
            db.add(instance)
            if commit:
                db.commit()
                db.refresh(instance)
            else:
                db.flush()

            logger.info(
                "Record created",
                model=self.model.__name__,
                id=str(inspect(instance).identity[0]) if inspect(instance).identity else None
            )
            return instance

        except SQLAlchemyError as e:
            if commit:
                db.rollback()
            logger.error(
                "Record creation failed",
                model=self.model.__name__,
                error=str(e)
            )
            raise PersistenceError(f"Failed to create {self.model.__name__}", original_error=e)

    def get_by_id(self, db: Session, id: UUID) -> Optional[ModelType]:
        """Get record by primary key."""
        return db.query(self.model).filter(self._pk == id).first()

    def update(self, db: Session, id: UUID, commit: bool = True, **kwargs) -> Optional[ModelType]:
        """Update record by primary key.

        Returns:
            Updated model instance if found, None otherwise

        Raises:
            PersistenceError: If the write fails
        """
        instance = self.get_by_id(db, id)
        if not instance:
            logger.warning(
                "Record not found for update",
                model=self.model.__name__,
                id=str(id)
            )
            return None

        try:
            for field, value in kwargs.items():
                if hasattr(instance, field):
                    setattr(instance, field, value)

            if commit:
                db.commit()
                db.refresh(instance)
            else:
                db.flush()

            logger.info(
                "Record updated",
                model=self.model.__name__,
                id=str(id),
                fields=list(kwargs.keys())
            )
            return instance

        except SQLAlchemyError as e:
            if commit:
                db.rollback()
            logger.error(
                "Record update failed",
                model=self.model.__name__,
                id=str(id),
                error=str(e)
            )
            raise PersistenceError(f"Failed to update {self.model.__name__}", original_error=e)

    def exists(self, db: Session, id: UUID) -> bool:
        """Check if record exists by primary key."""
        return self.get_by_id(db, id) is not None
