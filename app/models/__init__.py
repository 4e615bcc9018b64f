"""
Models package initialization
Import all models and setup relationships
"""

from .category import Category
from .item import Item

# Import and setup relationships
from .relations import setup_relationships

# Setup all relationships after models are imported
setup_relationships()

# Make models available at package level
__all__ = [
    "Category",
    "Item",
]
