# app/schemas/category.py
from typing import List

from pydantic import BaseModel, ConfigDict

# ==================== Category Schemas ====================


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class CategoryListResponse(BaseModel):
    categories: List[CategoryResponse]
