# app/routers/category.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.category import CategoryListResponse
from app.services.category import CategoryService

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
)


@router.get("", response_model=CategoryListResponse)
def list_categories(db: Session = Depends(get_db)):
    """
    Get every category in creation order.
    """
    service = CategoryService(db)
    return {"categories": service.list_categories()}
