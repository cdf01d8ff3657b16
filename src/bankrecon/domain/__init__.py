"""Domain layer for bankrecon application."""

from bankrecon.domain.context import ReconContext
from bankrecon.domain.mapping import MappingService
from bankrecon.domain.directory import DirectoryService
from bankrecon.domain.learning import LearningService
from bankrecon.domain.reconciliation import ReconciliationService
from bankrecon.domain.suggestions import SuggestionService
from bankrecon.domain.ingestion import IngestionService
from bankrecon.domain.csv_import import CSVImportService
from bankrecon.domain.summary import PartySummaryService
from bankrecon.domain.workspace import TransactionWorkspace

__all__ = [
    "ReconContext",
    "MappingService",
    "DirectoryService",
    "LearningService",
    "ReconciliationService",
    "SuggestionService",
    "IngestionService",
    "CSVImportService",
    "PartySummaryService",
    "TransactionWorkspace",
]
