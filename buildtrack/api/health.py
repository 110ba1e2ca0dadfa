"""
Health check service endpoints.
"""

from fastapi import APIRouter, Request
from datetime import datetime
from typing import Dict, Any

router = APIRouter()


@router.get("/")
async def health_check(request: Request) -> Dict[str, Any]:
    """Basic health check endpoint."""
    settings = request.app.state.settings
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "service": settings.app_name,
        "version": settings.app_version
    }


@router.get("/detailed")
async def detailed_health_check(request: Request) -> Dict[str, Any]:
    """Detailed health check with record counts and configured dependencies."""
    state = request.app.state
    settings = state.settings
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "service": settings.app_name,
        "version": settings.app_version,
        "records": {
            "items": len(state.item_service.items),
            "quotations": len(state.quotation_service.quotations),
            "projects": len(state.project_service.projects)
        },
        "dependencies": {
            "azure_storage": "configured" if state.project_service.storage is not None else "not_configured",
            "blueprint_provider": settings.blueprint_provider
        }
    }
