"""
Quotation service.
Builds client quotations from catalogue items and extends their costs.
"""

from datetime import datetime
from typing import List, Optional

import structlog

from ..core.exceptions import ValidationFailedError
from ..models.quotation import Quotation, QuotationCreate, QuotationDetail, QuotationLineDetail
from .item_service import ItemService
from .repository import InMemoryCollection, new_record_id

logger = structlog.get_logger(__name__)


class QuotationService:
    """Create, read and delete quotations."""

    def __init__(self, item_service: ItemService, collection: Optional[InMemoryCollection[Quotation]] = None):
        self.item_service = item_service
        self.quotations = collection if collection is not None else InMemoryCollection("Quotation")

    def create_quotation(self, request: QuotationCreate) -> QuotationDetail:
        missing = [line.item_id for line in request.items if line.item_id not in self.item_service.items]
        if missing:
            raise ValidationFailedError(f"Unknown item ids: {', '.join(missing)}")

        now = datetime.utcnow()
        quotation = Quotation(id=new_record_id(), created_at=now, updated_at=now, **request.model_dump())
        self.quotations.insert(quotation)
        logger.info(
            "Created quotation",
            quotation_id=quotation.id,
            client_name=quotation.client_name,
            line_count=len(quotation.items),
        )
        return self.build_detail(quotation)

    def list_quotations(self) -> List[QuotationDetail]:
        return [self.build_detail(q) for q in self.quotations.list()]

    def get_quotation(self, quotation_id: str) -> QuotationDetail:
        return self.build_detail(self.quotations.get(quotation_id))

    def delete_quotation(self, quotation_id: str) -> None:
        self.quotations.delete(quotation_id)
        logger.info("Deleted quotation", quotation_id=quotation_id)

    def build_detail(self, quotation: Quotation) -> QuotationDetail:
        """
        Populate each line with its item and compute totals.

        Lines whose item has since been deleted are kept with zero cost.
        """
        lines = []
        for line in quotation.items:
            item = self.item_service.items.find(line.item_id)
            if item is None:
                lines.append(QuotationLineDetail(item_id=line.item_id, quantity=line.quantity))
                continue
            material_total = round(item.material_cost * line.quantity, 2)
            labor_total = round(item.labor_cost * line.quantity, 2)
            lines.append(QuotationLineDetail(
                item_id=line.item_id,
                quantity=line.quantity,
                item=item,
                material_total=material_total,
                labor_total=labor_total,
                amount=round(material_total + labor_total, 2),
            ))

        material_total = round(sum(line.material_total for line in lines), 2)
        labor_total = round(sum(line.labor_total for line in lines), 2)
        return QuotationDetail(
            id=quotation.id,
            project_title=quotation.project_title,
            client_name=quotation.client_name,
            location=quotation.location,
            items=lines,
            material_total=material_total,
            labor_total=labor_total,
            grand_total=round(material_total + labor_total, 2),
            created_at=quotation.created_at,
            updated_at=quotation.updated_at,
        )
