"""
Record Store for Compliance Tracking.
Keeps every record collection in process memory, keyed by category and
identifier, optionally seeded from a YAML fixture file.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from compliance_tracker.core.records import (
    Category,
    RecordBase,
    model_for,
    resolve_category,
)

logger = logging.getLogger(__name__)


class RecordNotFoundError(KeyError):
    """Raised when no record with the given identifier exists in a collection."""


class InMemoryRecordStore:
    """In-memory record collections with never-reused identifiers."""

    def __init__(self):
        self._collections: Dict[Category, Dict[int, RecordBase]] = {
            category: {} for category in Category
        }
        self._next_ids: Dict[Category, int] = {category: 1 for category in Category}
        self._lock = threading.RLock()

    def _allocate_id(self, category: Category) -> int:
        record_id = self._next_ids[category]
        self._next_ids[category] += 1
        return record_id

    def _insert(self, category: Category, record: RecordBase) -> RecordBase:
        if record.id is None:
            record = record.model_copy(update={"id": self._allocate_id(category)})
        elif record.id in self._collections[category]:
            raise ValueError(f"Duplicate {category.value} identifier: {record.id}")
        else:
            self._next_ids[category] = max(self._next_ids[category], record.id + 1)
        self._collections[category][record.id] = record
        return record

    def list(self, category: Union[str, Category]) -> List[RecordBase]:
        """Return the records of a collection in insertion order."""
        category = resolve_category(category)
        with self._lock:
            return list(self._collections[category].values())

    def get(self, category: Union[str, Category], record_id: int) -> RecordBase:
        category = resolve_category(category)
        with self._lock:
            try:
                return self._collections[category][record_id]
            except KeyError:
                raise RecordNotFoundError(
                    f"{category.value} record {record_id} not found"
                ) from None

    def create(self, category: Union[str, Category], fields: Dict[str, Any]) -> RecordBase:
        """
        Create a record with a freshly generated identifier.

        Args:
            category: Target collection
            fields: Record fields; any supplied id is ignored

        Returns:
            The stored record

        Raises:
            pydantic.ValidationError: If the fields do not form a valid record
        """
        category = resolve_category(category)
        data = {key: value for key, value in fields.items() if key != "id"}
        record = model_for(category).model_validate(data)
        with self._lock:
            record = self._insert(category, record)
        logger.info(f"Created {category.value} record {record.id}")
        return record

    def update(
        self,
        category: Union[str, Category],
        record_id: int,
        fields: Dict[str, Any]
    ) -> RecordBase:
        """
        Merge fields into an existing record and revalidate it.

        The identifier is immutable; derived statuses are recomputed because
        they are never stored.
        """
        category = resolve_category(category)
        with self._lock:
            existing = self.get(category, record_id)
            merged = {**existing.model_dump(), **fields, "id": record_id}
            record = model_for(category).model_validate(merged)
            self._collections[category][record_id] = record
        logger.info(f"Updated {category.value} record {record_id}")
        return record

    def delete(self, category: Union[str, Category], record_id: int) -> None:
        category = resolve_category(category)
        with self._lock:
            if record_id not in self._collections[category]:
                raise RecordNotFoundError(f"{category.value} record {record_id} not found")
            del self._collections[category][record_id]
        logger.info(f"Deleted {category.value} record {record_id}")

    def collections(self) -> Dict[Category, List[RecordBase]]:
        """Snapshot of every collection."""
        with self._lock:
            return {
                category: list(records.values())
                for category, records in self._collections.items()
            }

    def load_seed(self, seed_path: Union[str, Path]) -> int:
        """
        Seed collections from a YAML file mapping category names to record lists.

        Args:
            seed_path: Path to the seed YAML file

        Returns:
            Number of records loaded
        """
        seed_path = Path(seed_path)
        if not seed_path.exists():
            logger.warning(f"Seed file not found, starting empty: {seed_path}")
            return 0

        with open(seed_path, 'r', encoding='utf-8') as f:
            seed = yaml.safe_load(f) or {}

        loaded = 0
        with self._lock:
            for category_name, raw_records in seed.items():
                category = resolve_category(category_name)
                model = model_for(category)
                for raw in raw_records or []:
                    self._insert(category, model.model_validate(raw))
                    loaded += 1

        logger.info(f"Seeded {loaded} records from {seed_path}")
        return loaded


def create_record_store(seed_path: Optional[Union[str, Path]] = None) -> InMemoryRecordStore:
    """Create a record store, seeding it when a seed file is given."""
    store = InMemoryRecordStore()
    if seed_path:
        store.load_seed(seed_path)
    return store
