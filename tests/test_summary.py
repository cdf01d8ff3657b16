"""Tests for party summaries and dashboard stats."""

from datetime import date
from decimal import Decimal

from bankrecon.domain.entities import TransactionKind


def _complete(reconciliation_service, txn_id, reference):
    reconciliation_service.confirm(txn_id, reference)


class TestListParties:
    """Tests for PartySummaryService.list_parties."""

    def test_only_completed_transactions_count(
        self, make_transaction, reconciliation_service, summary_service
    ):
        a = make_transaction(party_name="Apollo Pharmacy", amount="1000.00")
        b = make_transaction(party_name="apollo pharmacy", amount="250.00", kind=TransactionKind.DEBIT)
        make_transaction(party_name="Apollo Pharmacy", amount="999.00")  # still pending
        c = make_transaction(party_name="Anil Traders", amount="5000.00")
        _complete(reconciliation_service, a, "INV-1")
        _complete(reconciliation_service, b, "INV-2")
        _complete(reconciliation_service, c, "INV-3")

        summaries = summary_service.list_parties()

        assert [s.name for s in summaries] == ["Anil Traders", "Apollo Pharmacy"]
        assert summaries[0].total_amount == Decimal("5000.00")
        assert summaries[1].total_amount == Decimal("750.00")
        assert summaries[1].transaction_count == 2

    def test_date_range(self, make_transaction, reconciliation_service, summary_service):
        early = make_transaction(party_name="Apollo Pharmacy", txn_date=date(2025, 1, 10))
        late = make_transaction(party_name="Anil Traders", txn_date=date(2025, 6, 10))
        _complete(reconciliation_service, early, "INV-1")
        _complete(reconciliation_service, late, "INV-2")

        summaries = summary_service.list_parties(start_date=date(2025, 6, 1), end_date=date(2025, 6, 30))

        assert [s.name for s in summaries] == ["Anil Traders"]

    def test_empty(self, summary_service):
        assert summary_service.list_parties() == []


class TestDashboardStats:
    """Tests for PartySummaryService.dashboard_stats."""

    def test_totals(self, make_transaction, reconciliation_service, summary_service):
        done = make_transaction(party_name="Apollo Pharmacy", amount="1000.00", txn_date=date(2025, 11, 4))
        make_transaction(amount="400.00", txn_date=date(2025, 11, 20))
        make_transaction(amount="300.00", kind=TransactionKind.DEBIT, txn_date=date(2025, 3, 1))
        held = make_transaction(amount="50.00", txn_date=date(2024, 12, 31))
        _complete(reconciliation_service, done, "INV-1")
        reconciliation_service.set_hold(held)

        stats = summary_service.dashboard_stats(today=date(2025, 11, 25))

        assert stats.total_deposit_amount == Decimal("1450.00")
        assert stats.total_debits == Decimal("300.00")
        assert stats.net_balance == Decimal("1150.00")
        assert stats.completed_count == 1
        assert stats.completed_amount == Decimal("1000.00")
        assert stats.pending_count == 2
        assert stats.pending_amount == Decimal("700.00")
        assert stats.transactions_this_month == 2
        assert stats.transactions_this_year == 3
