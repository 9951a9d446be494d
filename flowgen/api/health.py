"""Health check router."""

from fastapi import APIRouter

from flowgen import __version__
from flowgen.ai.llm import llm_service
from flowgen.config import settings
from flowgen.models.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Report service status and which integrations are configured."""
    return HealthResponse(
        status="ok",
        version=__version__,
        integrations={
            "llm": llm_service.is_configured(),
            "llm_provider": llm_service.provider,
            "github": bool(settings.github_token),
            "vercel": settings.hosting_enabled,
        },
    )
