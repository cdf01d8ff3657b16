"""Statement CSV import."""

import csv
from pathlib import Path

from bankrecon.domain.context import ReconContext
from bankrecon.domain.entities import IngestionResult, TransactionCandidate, TransactionKind
from bankrecon.domain.ingestion import IngestionService
from bankrecon.utils.amount_parser import parse_magnitude
from bankrecon.utils.date_parser import parse_statement_date

REQUIRED_COLUMNS = ("date", "amount", "type", "narration")
OPTIONAL_COLUMNS = ("id", "bank_reference", "party_name")

KIND_ALIASES = {
    "credit": TransactionKind.CREDIT,
    "cr": TransactionKind.CREDIT,
    "deposit": TransactionKind.CREDIT,
    "debit": TransactionKind.DEBIT,
    "dr": TransactionKind.DEBIT,
    "withdrawal": TransactionKind.DEBIT,
}


def parse_kind(value: str) -> TransactionKind:
    """Parse a transaction type column value.

    Raises:
        ValueError: If the value is not a known credit/debit spelling
    """
    kind = KIND_ALIASES.get((value or "").strip().lower())
    if kind is None:
        raise ValueError(f"Unknown transaction type '{value}'. Use credit or debit")
    return kind


def read_statement_csv(csv_file_path: str) -> tuple[list[TransactionCandidate], list[str]]:
    """Read a statement CSV with a fixed header.

    Required columns are date, amount, type and narration; id,
    bank_reference and party_name are optional. Column names are matched
    case-insensitively.

    Returns:
        (candidates, row errors)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the header is missing a required column
    """
    csv_path = Path(csv_file_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

    candidates = []
    errors = []
    with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ValueError("CSV file has no columns")

        columns = {name.strip().lower(): name for name in reader.fieldnames if name}
        missing = [col for col in REQUIRED_COLUMNS if col not in columns]
        if missing:
            raise ValueError(f"CSV file missing required columns: {', '.join(missing)}")

        for row_num, row in enumerate(reader, start=2):  # header is row 1
            values = {
                col: (row.get(columns[col]) or "").strip()
                for col in REQUIRED_COLUMNS + OPTIONAL_COLUMNS
                if col in columns
            }
            if not any(values.values()):
                continue
            try:
                candidates.append(
                    TransactionCandidate(
                        date=parse_statement_date(values["date"]),
                        amount=parse_magnitude(values["amount"]),
                        kind=parse_kind(values["type"]),
                        narration=values["narration"],
                        bank_reference=values.get("bank_reference") or None,
                        id=values.get("id") or None,
                        party_name=values.get("party_name") or None,
                    )
                )
            except ValueError as e:
                errors.append(f"Row {row_num}: {e}")

    return candidates, errors


class CSVImportService:
    """Service for importing statement CSV files."""

    def __init__(self, context: ReconContext, ingestion_service: IngestionService | None = None):
        """Initialize CSV import service.

        Args:
            context: Shared service context
            ingestion_service: Ingestion service (created if omitted)
        """
        self.context = context
        self.ingestion_service = ingestion_service or IngestionService(context)

    def import_csv(self, csv_file_path: str) -> IngestionResult:
        """Import transactions from a statement CSV.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the header is unusable
        """
        candidates, errors = read_statement_csv(csv_file_path)
        result = self.ingestion_service.ingest(candidates)
        return IngestionResult(
            imported=result.imported,
            skipped=result.skipped,
            errors=tuple(errors) + result.errors,
            transaction_ids=result.transaction_ids,
        )
