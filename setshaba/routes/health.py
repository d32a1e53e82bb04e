"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from setshaba.core.settings import Settings
from setshaba.dependencies import get_db, get_settings
from setshaba.models.base import ErrorResponse, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_check(app_settings: Settings = Depends(get_settings)):
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": app_settings.APP_NAME,
        "version": app_settings.APP_VERSION,
        "timestamp": utcnow().isoformat(),
    }


@router.get("/db")
def database_health(db=Depends(get_db)):
    """
    Database connectivity check.
    Lists the top-level collections, which needs no particular data to exist.
    """
    try:
        if db is None:
            raise RuntimeError("Firestore is not initialized")
        collections = list(db.collections())
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        body = ErrorResponse(error="Database connection failed", statusCode=status.HTTP_503_SERVICE_UNAVAILABLE)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=body.model_dump(mode="json", exclude_none=True),
        )

    return {
        "status": "healthy",
        "database": "firestore",
        "connected": True,
        "collections_count": len(collections),
        "timestamp": utcnow().isoformat(),
    }
