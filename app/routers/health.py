from datetime import datetime, timezone

from fastapi import APIRouter, status
from sqlalchemy import text

from app.config import settings
from app.database import engine
from app.utils.response import create_response, handle_exception

router = APIRouter(tags=["Health"])


def _health_payload() -> dict:
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    return {
        "service": "blood-camp-backend",
        "status": "OK",
        "environment": settings.ENVIRONMENT,
        "version": settings.VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health")
@router.get("/api/health")
def health_check():
    try:
        return create_response(
            message="Server is running",
            data=_health_payload(),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Health check failed")
