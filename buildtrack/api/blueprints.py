"""
Blueprint analysis endpoint.
Proxies a blueprint image to the configured vision model.
"""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..core.exceptions import BlueprintAnalysisError, ValidationFailedError
from ..models.blueprint import BlueprintAnalysisRequest, BlueprintAnalysisResponse
from ..services.blueprint_analysis import BlueprintAnalysisService
from .dependencies import get_blueprint_service

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/analyze", response_model=BlueprintAnalysisResponse)
async def analyze_blueprint(
    request: BlueprintAnalysisRequest,
    service: BlueprintAnalysisService = Depends(get_blueprint_service),
):
    """
    Analyze a blueprint image.

    The model reviews the drawing for measurement errors, recommends
    materials with a price range, and returns keywords plus follow-up
    questions.
    """
    try:
        return await service.analyze(request)
    except ValidationFailedError as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except BlueprintAnalysisError as e:
        logger.error("Blueprint analysis failed", error=e.message, status_code=e.status_code)
        body = {"error": e.message}
        if e.details is not None:
            body["details"] = e.details
        return JSONResponse(body, status_code=e.status_code)
    except Exception as e:
        logger.error("Blueprint analysis failed unexpectedly", error=str(e), error_type=type(e).__name__)
        return JSONResponse({"error": "Failed to analyze blueprint.", "details": str(e)}, status_code=500)
