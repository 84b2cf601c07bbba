"""Read-only row counts for operators checking the outcome of a seed run."""

from fastapi import APIRouter

from src.database import engine
from src.schemas.seed import VerificationResponse
from src.services.orchestrator import check_connection
from src.services.verification import count_rows

router = APIRouter(prefix="/verification", tags=["Verification"])


@router.get(
    "",
    response_model=VerificationResponse,
    summary="Row counts per entity",
    description="Counts every entity table. A table that cannot be read is reported as null.",
)
async def get_verification() -> VerificationResponse:
    await check_connection(engine)
    return VerificationResponse(counts=await count_rows(engine))
