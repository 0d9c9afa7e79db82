from fastapi import APIRouter

from habitkeeper import __version__
from habitkeeper.api.schemas import HealthResponse
from habitkeeper.core.config import settings

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Check API health and configuration status."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        evaluate_on_mutation=settings.evaluate_on_mutation,
    )
