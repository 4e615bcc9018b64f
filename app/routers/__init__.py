from .category import router as category_router
from .image import router as image_router
from .item import router as item_router

routes = [
    item_router,
    image_router,
    category_router,
]
