"""
Health Check Router
Simple health check endpoint
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text

from mibalance.core.config import settings
from mibalance.db.database import engine

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check():
    """
    Health check endpoint.
    Returns API status and whether the database answers.
    """
    database = "connected"
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database check failed: {str(e)}")
        database = "unavailable"

    return {
        "status": "OK",
        "service": settings.PROJECT_NAME,
        "environment": settings.ENVIRONMENT,
        "database": database,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
