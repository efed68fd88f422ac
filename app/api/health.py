import os

from fastapi import APIRouter
from sqlalchemy import text

from app.database import engine
from app.utils.cache import redis_client
from app.utils.storage import BlobStore

router = APIRouter(prefix="/health", tags=["Health"])


@router.get(
    "/",
    summary="Health check",
    description="Basic health check endpoint."
)
def health_check():
    """Simple health check."""
    return {"status": "healthy"}


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check if all dependencies (DB, Redis, storage) are ready."
)
def readiness_check():
    """
    Readiness check for all dependencies.

    Returns status of:
    - Database connection
    - Redis connection (cache only, not required for readiness)
    - Image storage directory
    """
    checks = {
        "database": False,
        "redis": False,
        "storage": False,
    }

    # Check database
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            checks["database"] = True
    except Exception as e:
        checks["database_error"] = str(e)

    # Check Redis
    try:
        redis_client.ping()
        checks["redis"] = True
    except Exception as e:
        checks["redis_error"] = str(e)

    # Check storage root is writable
    root = BlobStore().root
    try:
        root.mkdir(parents=True, exist_ok=True)
        checks["storage"] = os.access(root, os.W_OK)
    except OSError as e:
        checks["storage_error"] = str(e)

    all_healthy = checks["database"] and checks["storage"]

    return {
        "status": "ready" if all_healthy else "not_ready",
        "checks": checks
    }
