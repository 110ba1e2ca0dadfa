"""
In-process document store.

Each collection keeps pydantic records keyed by id in insertion order. The
store lives as long as the application instance that owns it.
"""

import threading
import uuid
from typing import Callable, Dict, Generic, List, Optional, TypeVar

import structlog
from pydantic import BaseModel

from ..core.exceptions import RecordNotFoundError

logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def new_record_id() -> str:
    """Generate a new opaque record id."""
    return uuid.uuid4().hex


class InMemoryCollection(Generic[RecordT]):
    """Thread-safe id-keyed collection of records."""

    def __init__(self, kind: str):
        self.kind = kind
        self._records: Dict[str, RecordT] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        with self._lock:
            return record_id in self._records

    def insert(self, record: RecordT) -> RecordT:
        record_id = getattr(record, "id")
        with self._lock:
            if record_id in self._records:
                raise ValueError(f"{self.kind} {record_id} already exists")
            self._records[record_id] = record
        logger.debug("Inserted record", kind=self.kind, record_id=record_id)
        return record

    def find(self, record_id: str) -> Optional[RecordT]:
        with self._lock:
            return self._records.get(record_id)

    def get(self, record_id: str) -> RecordT:
        record = self.find(record_id)
        if record is None:
            raise RecordNotFoundError(self.kind, record_id)
        return record

    def list(self, sort_key: Optional[Callable[[RecordT], object]] = None) -> List[RecordT]:
        with self._lock:
            records = list(self._records.values())
        if sort_key is not None:
            records.sort(key=sort_key)
        return records

    def replace(self, record: RecordT) -> RecordT:
        record_id = getattr(record, "id")
        with self._lock:
            if record_id not in self._records:
                raise RecordNotFoundError(self.kind, record_id)
            self._records[record_id] = record
        return record

    def delete(self, record_id: str) -> RecordT:
        with self._lock:
            record = self._records.pop(record_id, None)
        if record is None:
            raise RecordNotFoundError(self.kind, record_id)
        logger.debug("Deleted record", kind=self.kind, record_id=record_id)
        return record
