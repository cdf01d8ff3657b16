"""Party totals and dashboard statistics."""

from datetime import date
from decimal import Decimal
from typing import Optional

from bankrecon.domain.context import ReconContext
from bankrecon.domain.entities import DashboardStats, PartySummary, Transaction, TransactionKind
from bankrecon.domain.reconciliation import derive_flags


def signed_amount(transaction: Transaction) -> Decimal:
    """Credits count positive, debits negative."""
    if transaction.kind == TransactionKind.DEBIT:
        return -transaction.amount
    return transaction.amount


def filter_by_date(
    transactions: list[Transaction],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list[Transaction]:
    return [
        t
        for t in transactions
        if (start_date is None or t.date >= start_date) and (end_date is None or t.date <= end_date)
    ]


class PartySummaryService:
    """Service for per-party totals and headline numbers."""

    def __init__(self, context: ReconContext):
        """Initialize summary service.

        Args:
            context: Shared service context
        """
        self.context = context
        self.db = context.db

    def list_parties(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[PartySummary]:
        """Totals per party over completed transactions.

        Party names are grouped case-insensitively and shown as first seen.
        Total is credits minus debits.

        Args:
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)

        Returns:
            Summaries sorted by absolute total, largest first
        """
        transactions = filter_by_date(self.db.list_transactions(), start_date, end_date)

        groups: dict[str, dict] = {}
        for transaction in transactions:
            name = transaction.party_name.strip()
            if not name or not derive_flags(transaction).completed:
                continue
            group = groups.setdefault(name.lower(), {"name": name, "total": Decimal("0"), "count": 0})
            group["total"] += signed_amount(transaction)
            group["count"] += 1

        summaries = [
            PartySummary(name=g["name"], total_amount=g["total"], transaction_count=g["count"])
            for g in groups.values()
        ]
        summaries.sort(key=lambda s: (-abs(s.total_amount), s.name.lower()))
        return summaries

    def dashboard_stats(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> DashboardStats:
        """Headline numbers for the reconciliation dashboard.

        Args:
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            today: Reference date for the month/year counts (defaults to today)

        Returns:
            DashboardStats
        """
        today = today or date.today()
        transactions = filter_by_date(self.db.list_transactions(), start_date, end_date)

        zero = Decimal("0")
        deposits = zero
        debits = zero
        pending_amount = zero
        pending_count = 0
        completed_amount = zero
        completed_count = 0
        this_month = 0
        this_year = 0

        for transaction in transactions:
            flags = derive_flags(transaction)
            if transaction.kind == TransactionKind.CREDIT:
                deposits += transaction.amount
            else:
                debits += transaction.amount
            if flags.pending:
                pending_amount += transaction.amount
                pending_count += 1
            if flags.completed:
                completed_amount += transaction.amount
                completed_count += 1
            if transaction.date.year == today.year:
                this_year += 1
                if transaction.date.month == today.month:
                    this_month += 1

        return DashboardStats(
            total_deposit_amount=deposits,
            pending_amount=pending_amount,
            pending_count=pending_count,
            completed_amount=completed_amount,
            completed_count=completed_count,
            total_debits=debits,
            net_balance=deposits - debits,
            transactions_this_month=this_month,
            transactions_this_year=this_year,
        )
