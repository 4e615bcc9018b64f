# app/routers/image.py
from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from app.utils.image_store import ImageStore, get_image_store

router = APIRouter(tags=["Images"])


@router.get("/image/{image_filename}", response_class=FileResponse)
def get_image(image_filename: str, store: ImageStore = Depends(get_image_store)):
    """
    Serve a stored image.
    Unknown names fall back to the default image.
    """
    return FileResponse(store.get(image_filename), media_type="image/jpeg")
