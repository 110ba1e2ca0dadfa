"""
Quotation endpoints.
"""

from typing import List

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response

from ..core.exceptions import RecordNotFoundError, ValidationFailedError
from ..models.quotation import QuotationCreate, QuotationDetail
from ..services.quotation_service import QuotationService
from .dependencies import get_quotation_service

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("", response_model=List[QuotationDetail])
async def list_quotations(service: QuotationService = Depends(get_quotation_service)):
    """All quotations with populated items and totals."""
    try:
        return service.list_quotations()
    except Exception as e:
        logger.error("Failed to list quotations", error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to list quotations: {str(e)}")


@router.post("", response_model=QuotationDetail, status_code=201)
async def create_quotation(request: QuotationCreate, service: QuotationService = Depends(get_quotation_service)):
    try:
        return service.create_quotation(request)
    except ValidationFailedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Failed to create quotation", error=str(e), client_name=request.client_name)
        raise HTTPException(status_code=500, detail=f"Failed to create quotation: {str(e)}")


@router.get("/{quotation_id}", response_model=QuotationDetail)
async def get_quotation(quotation_id: str, service: QuotationService = Depends(get_quotation_service)):
    try:
        return service.get_quotation(quotation_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Quotation not found")
    except Exception as e:
        logger.error("Failed to get quotation", error=str(e), quotation_id=quotation_id)
        raise HTTPException(status_code=500, detail=f"Failed to get quotation: {str(e)}")


@router.delete("/{quotation_id}", status_code=204)
async def delete_quotation(quotation_id: str, service: QuotationService = Depends(get_quotation_service)):
    try:
        service.delete_quotation(quotation_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Quotation not found")
    except Exception as e:
        logger.error("Failed to delete quotation", error=str(e), quotation_id=quotation_id)
        raise HTTPException(status_code=500, detail=f"Failed to delete quotation: {str(e)}")
    return Response(status_code=204)
