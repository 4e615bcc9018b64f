# app/services/catalog.py
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import BadInput, CatalogException
from app.schemas.item import ItemCreate
from app.services.category import CategoryService
from app.services.item import ItemRow, ItemService, SearchRow
from app.utils.image_store import ImageSource, ImageStore, image_store

logger = logging.getLogger(__name__)


class AddItemState(str, Enum):
    RECEIVED = "received"
    IMAGE_PERSISTED = "image_persisted"
    CATEGORY_RESOLVED = "category_resolved"
    ITEM_INSERTED = "item_inserted"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


# Stage reported on errors raised while leaving each state
FAILURE_STAGE = {
    AddItemState.RECEIVED: "image",
    AddItemState.IMAGE_PERSISTED: "category",
    AddItemState.CATEGORY_RESOLVED: "insert",
    AddItemState.ITEM_INSERTED: "commit",
}


@dataclass
class AddItemResult:
    id: int
    name: str
    category: str
    image_name: str


class CatalogService:
    """Use cases of the item catalog, on top of one request-scoped session."""

    def __init__(self, db: Session, store: Optional[ImageStore] = None):
        self.db = db
        self.store = store or image_store
        self.categories = CategoryService(db)
        self.items = ItemService(db)

    @staticmethod
    def validate(
        name: Optional[str], category: Optional[str], image: Optional[ImageSource]
    ) -> ItemCreate:
        """Return the stripped name and category, or raise ``BadInput``."""
        name = (name or "").strip()
        category = (category or "").strip()

        missing = [
            field
            for field, value in (("name", name), ("category", category), ("image", image))
            if not value
        ]
        if missing:
            raise BadInput(
                f"Missing required field(s): {', '.join(missing)}", stage="validate"
            )

        try:
            return ItemCreate(name=name, category=category)
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise BadInput(
                f"Invalid field(s): {', '.join(fields)}", stage="validate"
            ) from e

    def add_item(
        self,
        name: Optional[str],
        category: Optional[str],
        image: Optional[ImageSource],
    ) -> AddItemResult:
        """
        Store the image, then resolve the category and insert the item in one
        transaction.

        The image is written outside the transaction. When a later step fails
        the transaction is rolled back and the stored file is left in place;
        it is content-addressed, so keeping it is harmless.
        """
        try:
            fields = self.validate(name, category, image)
        except BadInput as e:
            logger.warning(f"Rejected add-item request: {e.message}")
            raise

        state = AddItemState.RECEIVED
        try:
            image_name = self.store.put(image)
            state = AddItemState.IMAGE_PERSISTED

            category_id = self.categories.resolve_or_create(fields.category)
            state = AddItemState.CATEGORY_RESOLVED

            item_id = self.items.insert(fields.name, category_id, image_name)
            state = AddItemState.ITEM_INSERTED

            self._commit()
            state = AddItemState.COMMITTED
        except CatalogException as e:
            e.stage = e.stage or FAILURE_STAGE[state]
            self._rollback(state, e)
            raise

        logger.info(
            f"Item '{fields.name}' added (ID: {item_id}, category: '{fields.category}', image: {image_name})"
        )
        return AddItemResult(
            id=item_id, name=fields.name, category=fields.category, image_name=image_name
        )

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            raise CatalogException(f"Commit failed: {e}", stage="commit") from e

    def _rollback(self, state: AddItemState, error: CatalogException) -> None:
        if state is not AddItemState.RECEIVED:
            self.db.rollback()
            logger.info(
                f"Add-item transaction {AddItemState.ROLLED_BACK.value} after {state.value}"
            )

        if error.is_client_error:
            logger.warning(f"Add-item failed at stage '{error.stage}': {error.message}")
        else:
            logger.error(
                f"Add-item failed at stage '{error.stage}': {error.message}",
                exc_info=True,
            )

    def list_items(self) -> List[ItemRow]:
        return self.items.list_all()

    def get_item(self, item_id: int) -> ItemRow:
        return self.items.get_by_id(item_id)

    def search_items(self, keyword: Optional[str]) -> List[SearchRow]:
        return self.items.search_by_name_substring(keyword or "")
