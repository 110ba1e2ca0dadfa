"""
Core FastAPI application factory.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config.settings import Settings, get_settings
from ..api.health import router as health_router
from ..api.items import router as items_router
from ..api.quotations import router as quotations_router
from ..api.projects import router as projects_router
from ..api.blueprints import router as blueprints_router
from ..integrations.azure_storage import BlobDocumentStorage
from ..services.blueprint_analysis import BlueprintAnalysisService, VisionModel, build_vision_model
from ..services.item_service import ItemService
from ..services.project_service import ProjectService
from ..services.quotation_service import QuotationService


def configure_logging(log_level: str = "INFO"):
    """Configure structured logging."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, log_level.upper(), logging.INFO))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[BlobDocumentStorage] = None,
    vision_model: Optional[VisionModel] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Every service is created here and attached to ``app.state``, so two
    applications never share records or progress stores. ``storage`` and
    ``vision_model`` default to the backends described by ``settings``.
    """
    settings = settings or get_settings()

    # Configure logging
    configure_logging(settings.log_level)
    logger = structlog.get_logger(__name__)

    # Create FastAPI app
    app = FastAPI(
        title=settings.app_name,
        description="Construction project management API: items, quotations, projects, milestones and blueprint analysis",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if storage is None:
        storage = BlobDocumentStorage.from_settings(settings)
    if vision_model is None:
        vision_model = build_vision_model(settings)

    item_service = ItemService()
    app.state.settings = settings
    app.state.item_service = item_service
    app.state.quotation_service = QuotationService(item_service)
    app.state.project_service = ProjectService(settings, storage=storage, clock=clock)
    app.state.blueprint_service = BlueprintAnalysisService(vision_model)

    @app.on_event("startup")
    async def startup_event():
        """Make sure the document container exists."""
        logger.info("Starting BuildTrack", environment=settings.environment, blueprint_provider=settings.blueprint_provider)
        if storage is not None:
            await storage.ensure_container_exists()

    # Include routers
    app.include_router(health_router, prefix="/health", tags=["health"])
    app.include_router(items_router, prefix="/api/items", tags=["items"])
    app.include_router(quotations_router, prefix="/api/quotations", tags=["quotations"])
    app.include_router(projects_router, prefix="/api/projects", tags=["projects"])
    app.include_router(blueprints_router, prefix="/api/blueprints", tags=["blueprints"])

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return JSONResponse({
            "message": settings.app_name,
            "version": settings.app_version,
            "status": "running",
            "timestamp": datetime.utcnow().isoformat(),
            "docs": "/docs",
            "health": "/health"
        })

    return app


app = create_app()
