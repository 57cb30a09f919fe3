from datetime import datetime

from fastapi import APIRouter

from tms.config import settings

router = APIRouter(
    prefix="/api",
    tags=["Health"]
)


@router.get("/health", summary="Liveness check")
def health_check():
    return {
        "status": "UP",
        "timestamp": datetime.now().isoformat(),
        "application": settings.app_name,
        "version": settings.app_version,
    }


@router.get("/info", summary="Application information")
def app_info():
    return {
        "application": settings.app_name,
        "version": settings.app_version,
        "description": settings.app_description,
        "timestamp": datetime.now().isoformat(),
    }
