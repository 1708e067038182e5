"""
Health check endpoints for the API.
"""
from fastapi import APIRouter
from typing import Dict, Any
from datetime import datetime

from integration_api.config import settings

router = APIRouter()

@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.
    Returns API status and version information.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT
    }

@router.get("/health/detailed")
async def detailed_health() -> Dict[str, Any]:
    """
    Health plus which optional integrations are configured.
    """
    basic_health = await health_check()

    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "api": basic_health,
        "integrations": {
            "default_org": bool(settings.SALESFORCE_INSTANCE_URL and settings.SALESFORCE_ACCESS_TOKEN),
            "connection_resolver": bool(settings.INTEGRATION_API_URL),
            "alternate_org": settings.SALESFORCE_ORG_NAME or None,
            "data_cloud": bool(settings.DATA_CLOUD_ORG and settings.DATA_CLOUD_QUERY),
        },
        "config": {
            "api_version": settings.SALESFORCE_API_VERSION,
            "commit_timeout_seconds": settings.COMMIT_TIMEOUT_SECONDS,
            "environment": settings.ENVIRONMENT,
            "debug": settings.DEBUG
        }
    }
