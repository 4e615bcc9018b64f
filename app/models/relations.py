# app/models/relations.py

from sqlalchemy.orm import relationship

from .category import Category
from .item import Item


def setup_relationships():
    """
    Configure all SQLAlchemy relationships between models.
    """

    # Category to Items (One-to-Many). Categories are never deleted,
    # so no cascade is configured.
    Category.items = relationship("Item", back_populates="category")
    Item.category = relationship("Category", back_populates="items")
