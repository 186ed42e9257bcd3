"""Record storage."""

from compliance_tracker.storage.record_store import (
    InMemoryRecordStore,
    RecordNotFoundError,
    create_record_store,
)

__all__ = ["InMemoryRecordStore", "RecordNotFoundError", "create_record_store"]
