# app/services/item.py
from dataclasses import dataclass
from typing import List

from sqlalchemy.orm import Session

from app.core.decorator import db_exception
from app.core.exceptions import NotFound
from app.models.category import Category
from app.models.item import Item

LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class ItemRow:
    id: int
    name: str
    category: str
    image_name: str


@dataclass(frozen=True)
class SearchRow:
    name: str
    category: str


def escape_like(keyword: str) -> str:
    """Escape LIKE wildcards so the keyword matches literally."""
    return (
        keyword.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


class ItemService:
    def __init__(self, db: Session):
        self.db = db

    def _joined_query(self):
        return self.db.query(
            Item.id, Item.name, Category.name.label("category"), Item.image_name
        ).join(Category, Item.category_id == Category.id)

    @db_exception("insert")
    def insert(self, name: str, category_id: int, image_name: str) -> int:
        """
        Add one item row and flush it to obtain its id.

        The category reference is checked by the database foreign key, not
        here; a dangling ``category_id`` surfaces as ``ConstraintViolation``.
        The caller owns the transaction.
        """
        item = Item(name=name, category_id=category_id, image_name=image_name)
        self.db.add(item)
        self.db.flush()
        return item.id

    @db_exception("read")
    def get_by_id(self, item_id: int) -> ItemRow:
        row = self._joined_query().filter(Item.id == item_id).first()
        if row is None:
            raise NotFound("Item not found")
        return ItemRow(*row)

    @db_exception("read")
    def list_all(self) -> List[ItemRow]:
        """Every item with its category name, in insertion order"""
        return [ItemRow(*row) for row in self._joined_query().order_by(Item.id.asc())]

    @db_exception("read")
    def search_by_name_substring(self, keyword: str) -> List[SearchRow]:
        """
        Items whose name contains ``keyword``.

        Matching is the backend's LIKE (ASCII case-insensitive on SQLite).
        An empty keyword matches every item.
        """
        pattern = f"%{escape_like(keyword)}%"
        rows = (
            self.db.query(Item.name, Category.name.label("category"))
            .join(Category, Item.category_id == Category.id)
            .filter(Item.name.like(pattern, escape=LIKE_ESCAPE))
            .order_by(Item.id.asc())
        )
        return [SearchRow(*row) for row in rows]
