# app/schemas/item.py
from typing import List

from pydantic import BaseModel, ConfigDict, Field

# ==================== Item Schemas ====================


class ItemCreate(BaseModel):
    """Form fields of an add-item request, after stripping."""

    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)


class ItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category: str
    image_name: str


class ItemListResponse(BaseModel):
    items: List[ItemResponse]


class SearchResult(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    category: str


class SearchResponse(BaseModel):
    items: List[SearchResult]


class MessageResponse(BaseModel):
    message: str
