from fastapi import APIRouter, Depends

from app.api.dependencies import get_settings
from app.config.settings import Settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    return {"status": "ok", "env": settings.app_env}
