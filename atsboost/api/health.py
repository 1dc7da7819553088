from fastapi import APIRouter

from atsboost.config.settings import settings
from atsboost.libs.database import get_database


router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health_check() -> dict[str, str]:
    database_ok = get_database().check_connection()
    return {
        "status": "ok" if database_ok else "degraded",
        "message": "Healthy" if database_ok else "Database unavailable",
        "version": settings.app_version,
        "environment": settings.app_env,
        "database": "connected" if database_ok else "disconnected",
    }
