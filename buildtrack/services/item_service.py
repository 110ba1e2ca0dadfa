"""
Item catalogue service.
"""

from datetime import datetime
from typing import List, Optional

import structlog

from ..models.item import Item, ItemCreate, ItemUpdate
from .repository import InMemoryCollection, new_record_id

logger = structlog.get_logger(__name__)


class ItemService:
    """CRUD operations on priced items."""

    def __init__(self, collection: Optional[InMemoryCollection[Item]] = None):
        self.items = collection if collection is not None else InMemoryCollection("Item")

    def list_items(self) -> List[Item]:
        """All items sorted by name."""
        return self.items.list(sort_key=lambda item: item.name.lower())

    def get_item(self, item_id: str) -> Item:
        return self.items.get(item_id)

    def create_item(self, request: ItemCreate) -> Item:
        now = datetime.utcnow()
        item = Item(id=new_record_id(), created_at=now, updated_at=now, **request.model_dump())
        self.items.insert(item)
        logger.info("Created item", item_id=item.id, name=item.name)
        return item

    def update_item(self, item_id: str, request: ItemUpdate) -> Item:
        current = self.items.get(item_id)
        item = current.model_copy(update={**request.model_dump(), "updated_at": datetime.utcnow()})
        self.items.replace(item)
        logger.info("Updated item", item_id=item_id)
        return item

    def delete_item(self, item_id: str) -> Item:
        item = self.items.delete(item_id)
        logger.info("Deleted item", item_id=item_id)
        return item
