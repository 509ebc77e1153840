"""Reconciliation orchestrator - main workflow coordination."""

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from app.config import settings
from app.services.errors import (
    GenerationFailure,
    InvalidInput,
    MatchingFailure,
    ReconciliationError,
)
from app.services.ledger_file import read_ledger_rows
from app.services.matching import MatchingEngine, MatchResult, RuleSet, load_rules
from app.services.normalizer import RecordNormalizer
from app.services.output import OutputRowGenerator, ReconciliationSummary, bucket_date

logger = logging.getLogger(__name__)

DEFAULT_COMPANY_NAME = "Company"


@dataclass
class ReconciliationResult:
    """Result of a reconciliation run."""

    results: list[MatchResult]
    csv_content: str
    summary: ReconciliationSummary
    company_name: str = DEFAULT_COMPANY_NAME
    duration_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to the API response shape."""
        comparison_results = []
        for result in self.results:
            item = result.to_dict()
            item["formatted_date"] = bucket_date(result.bank_transaction.date)[0]
            comparison_results.append(item)
        return {
            "success": True,
            "company_name": self.company_name,
            "comparison_results": comparison_results,
            "csv_content": self.csv_content,
            "stats": self.summary.to_dict(),
        }


class ReconciliationOrchestrator:
    """Orchestrates one stateless reconciliation.

    Flow:
    1. Normalize bank and ledger batches (reject if either ends up empty)
    2. Match bank transactions against the ledger
    3. Generate upload rows and summary counts

    Failures inside matching or generation are reported once for the whole
    batch; no partial output is returned.
    """

    def __init__(
        self,
        rules: RuleSet | None = None,
        threshold: int | None = None,
        normalizer: RecordNormalizer | None = None,
    ):
        """Initialize orchestrator.

        Args:
            rules: Rule tables shared by matching and output (defaults to configured)
            threshold: Minimum match score
            normalizer: Record normalizer
        """
        self.rules = rules if rules is not None else load_rules()
        self.normalizer = normalizer or RecordNormalizer()
        self.engine = MatchingEngine(rules=self.rules, threshold=threshold)
        self.generator = OutputRowGenerator(self.rules)
        self.max_bank_transactions = settings.max_bank_transactions
        self.max_ledger_transactions = settings.max_ledger_transactions

    def reconcile(
        self,
        raw_bank: Sequence[Any] | None,
        raw_ledger: Sequence[Any] | None,
        company_name: str | None = None,
    ) -> ReconciliationResult:
        """Reconcile raw bank records against raw ledger rows.

        Raises:
            InvalidInput: Missing input, oversized batch, or nothing valid after filtering
            MatchingFailure: Unexpected error while scoring
            GenerationFailure: Unexpected error while building rows
        """
        start_time = datetime.now(UTC)
        company_name = company_name or DEFAULT_COMPANY_NAME

        if not raw_bank or not raw_ledger:
            raise InvalidInput("Missing bank data or GL file")

        bank = self.normalizer.normalize_bank_batch(raw_bank)
        ledger = self.normalizer.normalize_ledger_batch(raw_ledger)

        if len(bank) > self.max_bank_transactions:
            raise InvalidInput(
                f"Too many bank transactions: {len(bank)} (limit {self.max_bank_transactions})"
            )
        if len(ledger) > self.max_ledger_transactions:
            raise InvalidInput(
                f"Too many GL transactions: {len(ledger)} (limit {self.max_ledger_transactions})"
            )

        logger.info(
            f"Reconciling {len(bank)} bank transactions against {len(ledger)} "
            f"GL transactions for {company_name}"
        )

        try:
            results = self.engine.reconcile(bank, ledger)
        except ReconciliationError:
            raise
        except Exception as e:
            logger.exception(f"Error during comparison: {e}")
            raise MatchingFailure("Error comparing transactions") from e

        try:
            csv_content = self.generator.generate_csv(results)
        except Exception as e:
            logger.exception(f"Error generating CSV: {e}")
            raise GenerationFailure("Error generating CSV") from e

        summary = self.generator.summarize(results, len(bank), len(ledger))
        duration = (datetime.now(UTC) - start_time).total_seconds()
        logger.info(
            f"Reconciliation finished in {duration:.3f}s: "
            f"{summary.matched_transactions} matched, {summary.unmatched_transactions} unmatched"
        )

        return ReconciliationResult(
            results=results,
            csv_content=csv_content,
            summary=summary,
            company_name=company_name,
            duration_seconds=duration,
        )

    def reconcile_upload(
        self,
        bank_data: str | None,
        ledger_content: str | bytes | None,
        company_name: str | None = None,
    ) -> ReconciliationResult:
        """Reconcile a JSON bank batch against a delimited ledger file."""
        if not bank_data or not ledger_content:
            raise InvalidInput("Missing bank data or GL file")

        try:
            raw_bank = json.loads(bank_data)
        except json.JSONDecodeError as e:
            raise InvalidInput(f"Invalid bank data format: {e}") from e

        raw_ledger = read_ledger_rows(ledger_content)
        return self.reconcile(raw_bank, raw_ledger, company_name)
