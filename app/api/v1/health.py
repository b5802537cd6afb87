"""Health check: database reachability and whether the token signing key is persistent."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """Unauthenticated; used by load balancers and monitoring."""
    settings = get_settings()
    return HealthResponse(
        environment=settings.APP_ENV,
        database="connected" if check_db_connected(db) else "disconnected",
        signing_key="configured" if settings.JWT_SECRET is not None else "ephemeral",
    )
