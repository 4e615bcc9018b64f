"""
Application initialization module
Handles initial setup tasks like creating tables and the default image
"""

import logging

from app.core.database import Base, engine
from app.utils.image_store import ImageStore

logger = logging.getLogger(__name__)


def init_database() -> None:
    """Create the catalog tables if they don't exist."""
    # Register models on Base.metadata
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")


def init_image_store(store: ImageStore) -> None:
    """Create the image directory and the default fallback image."""
    try:
        store.ensure_default()
    except Exception as e:
        logger.error(f"Failed to initialize image store: {e}")
        raise
    logger.info(f"Image directory ready: {store.image_dir.absolute()}")


def initialize_application(store: ImageStore) -> None:
    """
    Run all application initialization tasks.

    Args:
        store: Image store serving the application
    """
    logger.info("Starting application initialization...")

    init_database()
    init_image_store(store)

    logger.info("Application initialization completed")
