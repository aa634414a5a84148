"""FastAPI health endpoint with database diagnostics."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .. import db as database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Health check endpoint for load balancers and monitoring."""
    if not database.is_configured():
        db_status = "not_configured"
    else:
        try:
            with database.SessionLocal() as session:
                session.execute(text("SELECT 1"))
            db_status = "ok"
        except SQLAlchemyError as e:
            logger.warning("Health check could not reach the database: %s", e)
            db_status = "unreachable"

    return {
        "status": "ok" if db_status == "ok" else "degraded",
        "service": "rematch-engine",
        "checks": {"database": db_status},
    }
