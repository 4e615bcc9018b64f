# app/models/item.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from app.core.database import Base


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True)

    # Basic Info
    name = Column(String(255), nullable=False, index=True)

    # Foreign Key
    category_id = Column(
        Integer, ForeignKey("categories.id"), nullable=False, index=True
    )

    # Stored image filename ('<sha256-hex>.jpg')
    image_name = Column(String(255), nullable=False)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<Item(id={self.id}, name='{self.name}', category_id={self.category_id})>"
