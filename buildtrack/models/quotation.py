"""
Quotation data models.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from .item import Item


class QuotationLine(BaseModel):
    """One requested item and its quantity."""
    item_id: str
    quantity: float = Field(..., gt=0)


class QuotationCreate(BaseModel):
    """Request model for creating a quotation."""
    model_config = ConfigDict(str_strip_whitespace=True)

    project_title: str = Field(..., min_length=1)
    client_name: str = Field(..., min_length=1)
    location: Optional[str] = None
    items: List[QuotationLine] = []


class Quotation(QuotationCreate):
    """Stored quotation record."""
    id: str
    created_at: datetime
    updated_at: datetime


class QuotationLineDetail(BaseModel):
    """Quotation line with the referenced item populated and costs extended."""
    item_id: str
    quantity: float
    item: Optional[Item] = None
    material_total: float = 0.0
    labor_total: float = 0.0
    amount: float = 0.0


class QuotationDetail(BaseModel):
    """Response model for a quotation with totals."""
    id: str
    project_title: str
    client_name: str
    location: Optional[str] = None
    items: List[QuotationLineDetail]
    material_total: float
    labor_total: float
    grand_total: float
    created_at: datetime
    updated_at: datetime
