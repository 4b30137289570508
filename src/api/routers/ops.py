import logging

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api.dependencies import get_services
from api.state import Services

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(services: Services = Depends(get_services)) -> dict:
    """Health check endpoint for container orchestration."""
    health = {
        "status": "healthy",
        "storage": services.settings.storage_backend,
        "llm_provider": services.settings.llm_provider,
        "llm_configured": services.llm_client.is_configured,
    }

    if services.database is not None:
        db_health = await services.database.health_check()
        health["database"] = db_health
        if db_health["status"] != "healthy":
            health["status"] = "degraded"

    if not services.llm_client.is_configured:
        health["status"] = "degraded"

    return health


@router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus scrape endpoint.
    """
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
