"""Tests for ingestion and batch deduplication."""

from datetime import date
from decimal import Decimal

from bankrecon.domain.entities import TransactionCandidate, TransactionKind
from bankrecon.domain.ingestion import composite_key, dedup_batch

MERCURE_NARRATION = "NEFT CR-SBIN0002776-MERCURE MEDI SURGE-SBINN52025110406690875"


def _candidate(**overrides) -> TransactionCandidate:
    values = dict(
        date=date(2025, 11, 4),
        amount=Decimal("1500.00"),
        kind=TransactionKind.CREDIT,
        narration=MERCURE_NARRATION,
    )
    values.update(overrides)
    return TransactionCandidate(**values)


class TestDedupBatch:
    """Tests for dedup on load."""

    def test_same_id_kept_once(self):
        """Test that the first record with a given id wins."""
        first = _candidate(id="T1", narration="first")
        second = _candidate(id=" T1 ", narration="second")

        unique, dropped = dedup_batch([first, second])

        assert unique == [first]
        assert dropped == 1

    def test_composite_key_without_id(self):
        a = _candidate(bank_reference="UTR1")
        b = _candidate(bank_reference="UTR1", amount=Decimal("1500"))
        c = _candidate(bank_reference="UTR2")

        unique, dropped = dedup_batch([a, b, c])

        assert unique == [a, c]
        assert dropped == 1

    def test_composite_key_uses_narration_prefix(self):
        prefix = "X" * 50
        assert composite_key(_candidate(narration=prefix + "AAA")) == composite_key(
            _candidate(narration=prefix + "BBB")
        )


class TestIngest:
    """Tests for IngestionService.ingest."""

    def test_two_records_with_same_id_yield_one(self, temp_db, ingestion_service):
        result = ingestion_service.ingest([_candidate(id="T1"), _candidate(id="T1", narration="other")])

        assert result.imported == 1
        assert result.skipped == 1
        assert [t.id for t in temp_db.list_transactions()] == ["T1"]

    def test_new_records_get_defaults(self, temp_db, ingestion_service):
        result = ingestion_service.ingest([_candidate(amount=Decimal("-250.50"), kind=TransactionKind.DEBIT)])

        txn = temp_db.get_transaction(result.transaction_ids[0])
        assert txn.id.startswith("txn_")
        assert txn.amount == Decimal("250.50")
        assert txn.kind == TransactionKind.DEBIT
        assert txn.party_name == ""
        assert txn.external_reference == ""
        assert not txn.added_to_external_system

    def test_reimport_is_skipped(self, temp_db, ingestion_service):
        batch = [_candidate(id="T1"), _candidate(bank_reference="UTR9")]
        ingestion_service.ingest(batch)

        result = ingestion_service.ingest(batch)

        assert result.imported == 0
        assert result.skipped == 2
        assert len(temp_db.list_transactions()) == 2

    def test_invalid_records_are_reported(self, ingestion_service):
        result = ingestion_service.ingest(
            [_candidate(narration="  "), _candidate(amount=Decimal("0")), _candidate(id="OK")]
        )

        assert result.imported == 1
        assert len(result.errors) == 2
        assert result.errors[0].startswith("Record 1:")

    def test_supplied_party_name_trains_mappings(self, ingestion_service, mapping_service):
        ingestion_service.ingest([_candidate(party_name="Mercure Medi Surge Pvt Ltd")])
        assert mapping_service.resolve("mercure medi surge") == "Mercure Medi Surge Pvt Ltd"
