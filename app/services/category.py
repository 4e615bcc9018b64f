# app/services/category.py
import logging
import time
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import is_lock_conflict
from app.core.decorator import db_exception
from app.core.exceptions import ConstraintViolation
from app.models.category import Category

logger = logging.getLogger(__name__)

LOCK_BACKOFF_SECONDS = 0.05


class CategoryService:
    def __init__(self, db: Session):
        self.db = db

    def _find_id(self, name: str) -> Optional[int]:
        return self.db.query(Category.id).filter(Category.name == name).scalar()

    @db_exception("category")
    def resolve_or_create(self, name: str) -> int:
        """
        Return the id of category ``name``, inserting it on first use.

        Runs inside the caller's transaction and never commits. The insert is
        wrapped in a SAVEPOINT: when a concurrent writer created the same name
        first, the unique constraint rejects ours, the SAVEPOINT is rolled back
        and the existing row is read instead.

        On SQLite a concurrent writer shows up as a lock error rather than a
        unique violation. Our read lock blocks the other writer's commit, so
        the whole transaction is rolled back and the lookup starts over. Call
        this before any other write of the transaction.
        """
        attempts = max(1, settings.db_lock_retries)
        for attempt in range(1, attempts + 1):
            try:
                return self._resolve_or_create(name)
            except OperationalError as e:
                if not is_lock_conflict(e) or attempt == attempts:
                    raise
                logger.info(
                    f"Category '{name}' is being written concurrently, retrying ({attempt}/{attempts})"
                )
                self.db.rollback()
                time.sleep(LOCK_BACKOFF_SECONDS * attempt)

    def _resolve_or_create(self, name: str) -> int:
        category_id = self._find_id(name)
        if category_id is not None:
            return category_id

        try:
            with self.db.begin_nested():
                category = Category(name=name)
                self.db.add(category)
                self.db.flush()
            logger.info(f"Created category '{name}' (ID: {category.id})")
            return category.id
        except IntegrityError:
            logger.info(f"Category '{name}' was created concurrently, reading it back")

        category_id = self._find_id(name)
        if category_id is None:
            raise ConstraintViolation(
                f"Category '{name}' could neither be created nor found",
                stage="category",
            )
        return category_id

    def list_categories(self) -> List[Category]:
        """Get every category in creation order"""
        return self.db.query(Category).order_by(Category.id.asc()).all()
