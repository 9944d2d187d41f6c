import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from dayflow.config import get_settings
from dayflow.db import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Liveness plus database reachability."""

    status: Literal["ok", "degraded"]
    service: str
    version: str
    environment: str
    database: Literal["reachable", "unreachable"]


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report service health; a failed database ping degrades but never fails the probe."""
    settings = get_settings()
    database: Literal["reachable", "unreachable"] = "reachable"

    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database ping failed")
        database = "unreachable"

    return HealthResponse(
        status="ok" if database == "reachable" else "degraded",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        database=database,
    )
