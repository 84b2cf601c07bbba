"""Health check endpoint; always HTTP 200 so it can serve as a liveness probe."""

from fastapi import APIRouter

from src.config import settings
from src.database import engine
from src.errors import InfrastructureError
from src.schemas.health import HealthResponse
from src.services.orchestrator import check_connection

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Report whether the ledger database answers ``SELECT 1``."""
    try:
        await check_connection(engine)
        db_status = "connected"
        app_status = "ok"
    except InfrastructureError:
        db_status = "disconnected"
        app_status = "degraded"

    return HealthResponse(
        status=app_status,
        database=db_status,
        version=settings.version,
        built_by=settings.app_name,
    )
