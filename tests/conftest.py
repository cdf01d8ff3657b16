"""Shared pytest fixtures for bankrecon tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
from pathlib import Path
import pytest

from bankrecon.config import Settings
from bankrecon.database.factories import create_sqlite_database
from bankrecon.domain.context import ReconContext
from bankrecon.domain.directory import DirectoryService
from bankrecon.domain.entities import TransactionKind
from bankrecon.domain.ingestion import IngestionService
from bankrecon.domain.learning import LearningService
from bankrecon.domain.mapping import MappingService
from bankrecon.domain.reconciliation import ReconciliationService
from bankrecon.domain.suggestions import SuggestionService
from bankrecon.domain.summary import PartySummaryService

MERCURE_NARRATION = "NEFT CR-SBIN0002776-MERCURE MEDI SURGE-SBINN52025110406690875"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def settings():
    """Settings with caching disabled so every read goes to the store."""
    return Settings(mapping_cache_ttl=0.0, directory_cache_ttl=0.0)


@pytest.fixture
def context(temp_db, settings):
    """Create a ReconContext over the temporary database."""
    return ReconContext(temp_db, settings=settings)


@pytest.fixture
def mapping_service(context):
    return MappingService(context)


@pytest.fixture
def directory_service(context):
    return DirectoryService(context)


@pytest.fixture
def learning_service(context, mapping_service):
    return LearningService(context, mapping_service)


@pytest.fixture
def reconciliation_service(context, learning_service):
    return ReconciliationService(context, learning_service)


@pytest.fixture
def suggestion_service(context, mapping_service, directory_service):
    return SuggestionService(context, mapping_service, directory_service)


@pytest.fixture
def ingestion_service(context, learning_service):
    return IngestionService(context, learning_service)


@pytest.fixture
def summary_service(context):
    return PartySummaryService(context)


@pytest.fixture
def make_transaction(temp_db):
    """Factory that inserts a transaction and returns its ID."""
    counter = {"n": 0}

    def _make(
        narration: str = MERCURE_NARRATION,
        amount: str = "1500.00",
        kind: TransactionKind = TransactionKind.CREDIT,
        txn_date: date = date(2025, 11, 4),
        party_name: str = "",
        transaction_id: str | None = None,
        bank_reference: str | None = None,
    ) -> str:
        counter["n"] += 1
        return temp_db.create_transaction(
            transaction_id=transaction_id or f"T{counter['n']}",
            date=txn_date,
            amount=Decimal(amount),
            kind=kind,
            narration=narration,
            bank_reference=bank_reference,
            party_name=party_name,
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
