
# blog/routers.py
from fastapi import APIRouter
from config.settings import DATA_LOCATION, FRONTPAGE_LOCATION
from .views import add_post, frontpage, serve_data

router = APIRouter()

router.get(FRONTPAGE_LOCATION, include_in_schema=False)(frontpage)
router.post(FRONTPAGE_LOCATION)(add_post)
router.get(DATA_LOCATION + "/{file_id}")(serve_data)
