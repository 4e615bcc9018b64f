# app/routers/item.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.item import (
    ItemListResponse,
    ItemResponse,
    MessageResponse,
    SearchResponse,
)
from app.services.catalog import CatalogService
from app.utils.image_store import ImageStore, get_image_store

router = APIRouter(
    tags=["Items"],
    responses={404: {"description": "Not found"}},
)


# ==================== Item Endpoints ====================


@router.post("/items", response_model=MessageResponse)
def add_item(
    name: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None, description="Item image"),
    db: Session = Depends(get_db),
    store: ImageStore = Depends(get_image_store),
):
    """
    Add an item.
    The image is stored under its SHA-256 digest; the category is created
    on first use.
    """
    service = CatalogService(db, store)
    result = service.add_item(name, category, image.file if image else None)
    return {"message": f"item received: {result.name}"}


@router.get("/items", response_model=ItemListResponse)
def list_items(db: Session = Depends(get_db)):
    """
    Get every item with its category name, in insertion order.
    """
    service = CatalogService(db)
    return {"items": service.list_items()}


@router.get("/items/{item_id}", response_model=ItemResponse)
def get_item(item_id: int, db: Session = Depends(get_db)):
    """
    Get an item by ID.
    """
    service = CatalogService(db)
    return service.get_item(item_id)


@router.get("/search", response_model=SearchResponse)
def search_items(
    keyword: str = Query("", description="Substring of the item name"),
    db: Session = Depends(get_db),
):
    """
    Search items by name substring. An empty keyword returns every item.
    """
    service = CatalogService(db)
    return {"items": service.search_items(keyword)}
