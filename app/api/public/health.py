from fastapi import APIRouter

from app.core.config import settings


router = APIRouter(prefix="/healthz", tags=["health"])


@router.get("")
def healthz():
    return {
        "status": "ok",
        "models": list(settings.gemini_models),
        "weather_configured": bool(settings.weather_api_key),
        "generation_configured": bool(settings.gemini_api_key),
    }
