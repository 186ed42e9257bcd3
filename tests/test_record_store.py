"""
Unit tests for the in-memory record store.

Run with: pytest tests/test_record_store.py -v
"""
import pytest
from pydantic import ValidationError

from compliance_tracker.core.records import Category, DualTrackRecord, UnknownCategoryError
from compliance_tracker.core.status import ComplianceState
from compliance_tracker.storage.record_store import RecordNotFoundError, create_record_store


class TestRecordStore:
    """Test CRUD operations and identifier allocation."""

    def test_create_assigns_identifiers(self, empty_store):
        first = empty_store.create("commercial_license", {"name": "A", "expiry_date": "2030-01-01"})
        second = empty_store.create("commercial_license", {"name": "B"})
        assert (first.id, second.id) == (1, 2)

    def test_create_ignores_supplied_id(self, empty_store):
        record = empty_store.create("other_topic", {"id": 99, "name": "A"})
        assert record.id == 1

    def test_identifiers_never_reused(self, empty_store):
        empty_store.create("other_topic", {"name": "A"})
        empty_store.delete("other_topic", 1)
        assert empty_store.create("other_topic", {"name": "B"}).id == 2

    def test_create_validates(self, empty_store):
        with pytest.raises(ValidationError):
            empty_store.create("commercial_license", {"number": "no name"})

    def test_create_uses_category_shape(self, empty_store):
        record = empty_store.create(
            Category.LEASE_CONTRACT,
            {"name": "Lease", "internal_expiry_date": "2000-01-01"}
        )
        assert isinstance(record, DualTrackRecord)
        assert record.status == ComplianceState.EXPIRED

    def test_update_recomputes_status(self, empty_store):
        empty_store.create("trademark_cert", {"name": "Mark", "expiry_date": "2000-01-01"})
        record = empty_store.update("trademark_cert", 1, {"expiry_date": "2999-01-01"})
        assert record.status == ComplianceState.ACTIVE
        assert record.name == "Mark"
        assert empty_store.get("trademark_cert", 1).expiry_date == "2999-01-01"

    def test_update_keeps_identifier(self, empty_store):
        empty_store.create("trademark_cert", {"name": "Mark"})
        assert empty_store.update("trademark_cert", 1, {"id": 50}).id == 1

    def test_update_missing(self, empty_store):
        with pytest.raises(RecordNotFoundError):
            empty_store.update("trademark_cert", 5, {"name": "X"})

    def test_delete_missing(self, empty_store):
        with pytest.raises(RecordNotFoundError):
            empty_store.delete("trademark_cert", 5)

    def test_unknown_category(self, empty_store):
        with pytest.raises(UnknownCategoryError):
            empty_store.list("vehicles")

    def test_collections_snapshot(self, empty_store):
        snapshot = empty_store.collections()
        assert set(snapshot) == set(Category)
        snapshot[Category.OTHER_TOPIC].append("x")
        assert empty_store.list(Category.OTHER_TOPIC) == []


class TestSeedLoading:

    def test_seed_file(self, seeded_store):
        assert len(seeded_store.list("commercial_license")) == 3
        assert len(seeded_store.list("procedure")) == 2
        assert seeded_store.get("lease_contract", 2).internal_expiry_date is None

    def test_seeded_ids_continue(self, seeded_store):
        record = seeded_store.create("commercial_license", {"name": "New"})
        assert record.id == 4

    def test_missing_seed_file(self, tmp_path):
        store = create_record_store(tmp_path / "missing.yaml")
        assert store.list("procedure") == []

    def test_duplicate_seed_ids(self, tmp_path):
        seed = tmp_path / "seed.yaml"
        seed.write_text("other_topic:\n  - {id: 1, name: A}\n  - {id: 1, name: B}\n")
        with pytest.raises(ValueError):
            create_record_store(seed)
