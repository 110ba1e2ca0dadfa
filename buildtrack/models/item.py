"""
Item data models.
Priced line items (materials and labour per unit) used to build quotations.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field


class ItemBase(BaseModel):
    """Fields shared by item requests and records."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    unit: str = Field(..., min_length=1)
    material_cost: float = Field(0.0, ge=0)
    labor_cost: float = Field(0.0, ge=0)
    category: str = "Uncategorized"
    item_no: Optional[str] = None


class ItemCreate(ItemBase):
    """Request model for creating an item."""


class ItemUpdate(ItemBase):
    """Request model for replacing an item. Name and unit stay required."""


class Item(ItemBase):
    """Stored item record."""
    id: str
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def unit_cost(self) -> float:
        return self.material_cost + self.labor_cost


class ItemDeleteResponse(BaseModel):
    message: str
    item_id: str
