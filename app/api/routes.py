from fastapi import APIRouter

from app.api.assistant import legacy_router as fashion_assistant_router
from app.api.assistant import router as assistant_router
from app.api.public.health import router as health_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(fashion_assistant_router)

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(assistant_router)

api_router.include_router(v1_router)
