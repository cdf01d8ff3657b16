"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

from bankrecon.database.factories import create_memory_database
from bankrecon.domain import entities
from bankrecon.domain.errors import ConflictError, NotFoundError, ValidationError


def _create(db, transaction_id="T1", **overrides):
    values = dict(
        transaction_id=transaction_id,
        date=date(2025, 11, 4),
        amount=Decimal("1500.00"),
        kind=entities.TransactionKind.CREDIT,
        narration="NEFT CR-SBIN0002776-MERCURE MEDI SURGE-SBINN52025110406690875",
    )
    values.update(overrides)
    return db.create_transaction(**values)


class TestTransactions:
    """Tests for transaction storage."""

    def test_get_transaction_returns_domain_model(self, temp_db):
        """Test that get_transaction returns a domain Transaction entity."""
        _create(temp_db, bank_reference="SBINN52025110406690875")

        txn = temp_db.get_transaction("T1")

        assert isinstance(txn, entities.Transaction)
        assert txn.amount == Decimal("1500.00")
        assert txn.kind == entities.TransactionKind.CREDIT
        assert txn.bank_reference == "SBINN52025110406690875"
        assert txn.party_name == ""
        assert txn.external_reference == ""
        assert not txn.hold
        assert txn.created_at.tzinfo is not None

    def test_missing_transaction(self, temp_db):
        assert temp_db.get_transaction("nope") is None
        assert not temp_db.transaction_exists("nope")

    def test_list_filters_by_kind(self, temp_db):
        _create(temp_db, "T1")
        _create(temp_db, "T2", kind=entities.TransactionKind.DEBIT)

        assert [t.id for t in temp_db.list_transactions()] == ["T1", "T2"]
        assert [t.id for t in temp_db.list_transactions(entities.TransactionKind.DEBIT)] == ["T2"]

    def test_duplicate_id_is_a_conflict(self, temp_db):
        _create(temp_db)
        with pytest.raises(ConflictError):
            _create(temp_db)

    def test_update_writes_fields(self, temp_db):
        _create(temp_db)
        temp_db.update_transaction("T1", date(2025, 11, 4), party_name="Mercure", hold=True)

        txn = temp_db.get_transaction("T1")
        assert txn.party_name == "Mercure"
        assert txn.hold

    def test_date_cannot_change(self, temp_db):
        _create(temp_db)

        with pytest.raises(ValidationError):
            temp_db.update_transaction("T1", date(2025, 11, 4), date=date(2025, 12, 1))
        with pytest.raises(ValidationError):
            temp_db.update_transaction("T1", date(2025, 12, 1), notes="x")

        assert temp_db.get_transaction("T1").date == date(2025, 11, 4)
        assert temp_db.get_transaction("T1").notes is None

    def test_unknown_field_is_rejected(self, temp_db):
        _create(temp_db)
        with pytest.raises(ValidationError):
            temp_db.update_transaction("T1", date(2025, 11, 4), amount=Decimal("1"))

    def test_update_missing_transaction(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.update_transaction("nope", date(2025, 11, 4), notes="x")

    def test_find_by_external_reference_trims(self, temp_db):
        _create(temp_db, "T1")
        _create(temp_db, "T2")
        temp_db.update_transaction("T1", date(2025, 11, 4), external_reference=" INV-1 ")

        assert [t.id for t in temp_db.find_transactions_by_external_reference("INV-1")] == ["T1"]
        assert temp_db.find_transactions_by_external_reference("INV-1", exclude_id="T1") == []
        assert temp_db.find_transactions_by_external_reference("  ") == []


class TestMappingsAndDirectory:
    """Tests for mapping and directory storage."""

    def test_upsert_mapping(self, temp_db):
        now = datetime.now(UTC)
        first = temp_db.upsert_mapping("  Mercure  Medi ", "Mercure Medi Surge", 1, now)
        second = temp_db.upsert_mapping("mercure medi", "Mercure Medi Surge Pvt Ltd", 2, now)

        assert isinstance(first, entities.NameMapping)
        assert first.original_pattern == "mercure medi"
        assert second.id == first.id
        assert second.confidence == 2
        assert temp_db.get_mapping_by_pattern("MERCURE MEDI").corrected_name == "Mercure Medi Surge Pvt Ltd"

    def test_update_and_delete_mapping(self, temp_db):
        mapping = temp_db.upsert_mapping("anil", "Anil Traders", 1, datetime.now(UTC))

        temp_db.update_mapping(mapping.id, corrected_name="Anil Traders Pvt Ltd")
        assert temp_db.get_mapping(mapping.id).corrected_name == "Anil Traders Pvt Ltd"

        temp_db.delete_mapping(mapping.id)
        assert temp_db.get_mapping(mapping.id) is None
        with pytest.raises(NotFoundError):
            temp_db.delete_mapping(mapping.id)

    def test_directory_entries(self, temp_db):
        first = temp_db.add_directory_entry("Sri Balaji Pharmacy")
        temp_db.add_directory_entry("Apollo Pharmacy")

        entries = temp_db.list_directory_entries()
        assert all(isinstance(e, entities.DirectoryEntry) for e in entries)
        assert temp_db.list_directory_names() == ["Sri Balaji Pharmacy", "Apollo Pharmacy"]

        temp_db.remove_directory_entry(first)
        assert temp_db.list_directory_names() == ["Apollo Pharmacy"]


def test_memory_database():
    db = create_memory_database()
    db.connect()
    db.initialize_schema()
    _create(db)

    assert db.transaction_exists("T1")
    db.disconnect()
