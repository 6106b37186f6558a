"""Database migration utilities."""

import os
from pathlib import Path

from alembic import command
from alembic.config import Config
import structlog

logger = structlog.get_logger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


class MigrationManager:
    """Manages database migrations using Alembic."""

    def __init__(self, alembic_cfg_path: str = str(PROJECT_ROOT / "alembic.ini")) -> None:
        self.alembic_cfg_path = alembic_cfg_path
        self.config = None

    def _get_alembic_config(self) -> Config:
        """Get Alembic configuration.

        Raises:
            FileNotFoundError: If alembic.ini is not found
        """
        if self.config is None:
            if not os.path.exists(self.alembic_cfg_path):
                raise FileNotFoundError(f"Alembic config file not found: {self.alembic_cfg_path}")

            self.config = Config(self.alembic_cfg_path)

            script_location = self.config.get_main_option("script_location")
            if script_location:
                self.config.set_main_option("script_location", str(PROJECT_ROOT / script_location))

        return self.config

    def run_migrations(self) -> None:
        """Upgrade the database to the latest revision."""
        try:
            command.upgrade(self._get_alembic_config(), "head")
            logger.info("Database migrations completed successfully")
        except Exception as e:
            logger.error("Failed to run database migrations", error=str(e))
            raise


# Global migration manager instance
migration_manager = MigrationManager()


def init_database() -> None:
    """Initialize the database connection and bring the schema up to date.

    SQLite databases (local development) are created from the ORM metadata;
    everything else goes through Alembic.
    """
    from .database import db_manager

    logger.info("Initializing database...")
    db_manager.initialize()

    if db_manager.database_url.startswith("sqlite"):
        db_manager.create_tables()
    else:
        migration_manager.run_migrations()
