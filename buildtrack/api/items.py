"""
Item catalogue endpoints.
"""

from typing import List

import structlog
from fastapi import APIRouter, Depends, HTTPException

from ..core.exceptions import RecordNotFoundError
from ..models.item import Item, ItemCreate, ItemDeleteResponse, ItemUpdate
from ..services.item_service import ItemService
from .dependencies import get_item_service

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("", response_model=List[Item])
async def list_items(service: ItemService = Depends(get_item_service)):
    """All items sorted by name."""
    try:
        return service.list_items()
    except Exception as e:
        logger.error("Failed to list items", error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to list items: {str(e)}")


@router.post("", response_model=Item, status_code=201)
async def create_item(request: ItemCreate, service: ItemService = Depends(get_item_service)):
    try:
        return service.create_item(request)
    except Exception as e:
        logger.error("Failed to create item", error=str(e), name=request.name)
        raise HTTPException(status_code=500, detail=f"Failed to create item: {str(e)}")


@router.get("/{item_id}", response_model=Item)
async def get_item(item_id: str, service: ItemService = Depends(get_item_service)):
    try:
        return service.get_item(item_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Item not found")
    except Exception as e:
        logger.error("Failed to get item", error=str(e), item_id=item_id)
        raise HTTPException(status_code=500, detail=f"Failed to get item: {str(e)}")


@router.put("/{item_id}", response_model=Item)
async def update_item(item_id: str, request: ItemUpdate, service: ItemService = Depends(get_item_service)):
    try:
        return service.update_item(item_id, request)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Item not found for update")
    except Exception as e:
        logger.error("Failed to update item", error=str(e), item_id=item_id)
        raise HTTPException(status_code=500, detail=f"Failed to update item: {str(e)}")


@router.delete("/{item_id}", response_model=ItemDeleteResponse)
async def delete_item(item_id: str, service: ItemService = Depends(get_item_service)):
    try:
        service.delete_item(item_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Item not found for deletion")
    except Exception as e:
        logger.error("Failed to delete item", error=str(e), item_id=item_id)
        raise HTTPException(status_code=500, detail=f"Failed to delete item: {str(e)}")
    return ItemDeleteResponse(message="Item deleted successfully", item_id=item_id)
