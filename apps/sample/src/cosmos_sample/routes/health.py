"""Health check routes."""

from fastapi import APIRouter, Depends

from cosmos_data import CosmosDbConfig, get_cosmos_config
from cosmos_sample.config import Settings, get_settings
from cosmos_sample.models.health import HealthCheckResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    settings: Settings = Depends(get_settings),
    cosmos_config: CosmosDbConfig = Depends(get_cosmos_config),
) -> HealthCheckResponse:
    """Health check endpoint.

    Returns:
        HealthCheckResponse with status, version and Cosmos DB configuration state
    """
    return HealthCheckResponse(
        status="ok",
        version=settings.app_version,
        environment=settings.environment,
        database=cosmos_config.database,
        cosmos_configured=bool(cosmos_config.uri),
    )
