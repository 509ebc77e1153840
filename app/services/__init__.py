"""Services for reconciliation."""

from .documents import Deduplicator, DocumentNumberAssigner
from .errors import (
    EmptyBatch,
    GenerationFailure,
    InvalidInput,
    MatchingFailure,
    ReconciliationError,
)
from .ledger_file import read_ledger_rows
from .normalizer import RecordNormalizer, parse_amount
from .output import OutputRowGenerator, ReconciliationSummary, bucket_date
from .reconcile import ReconciliationOrchestrator, ReconciliationResult

__all__ = [
    "Deduplicator",
    "DocumentNumberAssigner",
    "EmptyBatch",
    "GenerationFailure",
    "InvalidInput",
    "MatchingFailure",
    "OutputRowGenerator",
    "ReconciliationError",
    "ReconciliationOrchestrator",
    "ReconciliationResult",
    "ReconciliationSummary",
    "RecordNormalizer",
    "bucket_date",
    "parse_amount",
    "read_ledger_rows",
]
