"""Matching engine - runs the strategy pipeline over a bank batch."""

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from app.config import settings
from app.models.recon import BankTransaction, LedgerTransaction
from app.services.documents import Deduplicator, DocumentNumberAssigner

from .check import CheckNumberMatcher
from .confidence import MatchResult, MatchStage, MatchState, MatchStatus, MatchStrategy
from .heuristic import HeuristicMatcher
from .known_vendor import KnownVendorMatcher
from .overlay import FeatureOverlayMatcher
from .relaxed import RelaxedMatcher
from .rules import RuleSet, load_rules
from .vendors import VendorKnowledgeBase

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationRun:
    """State owned by a single reconciliation run.

    Nothing here is shared between runs: each run tracks its own consumed
    ledger indices and seen duplicate keys.
    """

    ledger: Sequence[LedgerTransaction]
    knowledge_base: VendorKnowledgeBase
    used_ledger_indices: set[int] = field(default_factory=set)
    deduplicator: Deduplicator = field(default_factory=Deduplicator)

    def unused_ledger(self) -> Iterator[tuple[int, LedgerTransaction]]:
        """Ledger records not yet consumed, in input order."""
        for index, entry in enumerate(self.ledger):
            if index not in self.used_ledger_indices:
                yield index, entry

    def consume(self, index: int) -> None:
        """Mark a ledger record as matched."""
        if index in self.used_ledger_indices:
            raise ValueError(f"Ledger entry {index} already consumed")
        self.used_ledger_indices.add(index)


class MatchingEngine:
    """Pairs bank transactions with ledger records.

    Flow per bank transaction (input order):
    1. Drop duplicates of an earlier (description, amount)
    2. Run strategies in order while the score is below threshold:
       known vendor -> check number -> heuristic -> relaxed -> feature overlay
    3. Score >= threshold: Matched, consume the winning ledger record
    4. Assign the document number
    """

    def __init__(
        self,
        rules: RuleSet | None = None,
        threshold: int | None = None,
        strategies: list[MatchStrategy] | None = None,
    ):
        """Initialize engine.

        Args:
            rules: Rule tables (defaults to the configured rule set)
            threshold: Minimum score for a match
            strategies: Ordered strategy pipeline (defaults to the five stages)
        """
        self.rules = rules if rules is not None else load_rules()
        self.threshold = threshold if threshold is not None else settings.match_threshold
        self.strategies = (
            strategies if strategies is not None else self.default_strategies(self.rules)
        )
        self.document_numbers = DocumentNumberAssigner(self.rules)

    @staticmethod
    def default_strategies(rules: RuleSet) -> list[MatchStrategy]:
        return [
            KnownVendorMatcher(rules),
            CheckNumberMatcher(rules),
            HeuristicMatcher(),
            RelaxedMatcher(),
            FeatureOverlayMatcher(),
        ]

    def start_run(self, ledger: Sequence[LedgerTransaction]) -> ReconciliationRun:
        """Create the state for a fresh run over a ledger batch."""
        return ReconciliationRun(
            ledger=ledger,
            knowledge_base=VendorKnowledgeBase.from_ledger(ledger, self.rules),
        )

    def reconcile(
        self,
        bank: Sequence[BankTransaction],
        ledger: Sequence[LedgerTransaction],
        run: ReconciliationRun | None = None,
    ) -> list[MatchResult]:
        """Match a whole bank batch against a ledger batch.

        Returns:
            One MatchResult per non-duplicate bank transaction, in input order
        """
        run = run if run is not None else self.start_run(ledger)
        logger.info(f"Matching {len(bank)} bank transactions against {len(ledger)} ledger entries")

        results = []
        for position, transaction in enumerate(bank):
            key = transaction.dedup_key
            if run.deduplicator.is_duplicate(key):
                logger.info(f"Skipping duplicate transaction: {key}")
                continue
            results.append(self.match_one(position, transaction, run))

        matched = sum(1 for r in results if r.is_matched)
        logger.info(f"Matched {matched}/{len(results)} bank transactions")
        return results

    def match_one(
        self,
        position: int,
        transaction: BankTransaction,
        run: ReconciliationRun,
    ) -> MatchResult:
        """Match one bank transaction and commit the outcome to the run."""
        state = self.score(transaction, run)

        if state.score >= self.threshold:
            if state.ledger_index is not None:
                run.consume(state.ledger_index)
            result = MatchResult(
                bank_transaction=transaction,
                match_status=MatchStatus.MATCHED,
                document_number=self.document_numbers.assign(
                    position, transaction, state.ledger_transaction
                ),
                matched_ledger_transaction=state.ledger_transaction,
                score=state.score,
                stage=state.stage,
                ledger_index=state.ledger_index,
                position=position,
                reasons=tuple(state.reasons),
            )
        else:
            result = MatchResult(
                bank_transaction=transaction,
                match_status=MatchStatus.UNMATCHED,
                document_number=self.document_numbers.assign(position, transaction, None),
                score=state.score,
                stage=MatchStage.NONE,
                position=position,
                reasons=tuple(state.reasons),
            )

        logger.debug(
            f"{result.match_status.value} {transaction.description!r} "
            f"({transaction.total_amount:.2f}) score={state.score} "
            f"stage={state.stage.value} doc={result.document_number}"
        )
        return result

    def score(self, transaction: BankTransaction, run: ReconciliationRun) -> MatchState:
        """Run the strategy pipeline without committing anything to the run."""
        state = MatchState()
        for strategy in self.strategies:
            if state.score >= self.threshold:
                break
            outcome = strategy.match(transaction, run, state)
            if outcome is not None:
                state.apply(strategy.stage, strategy.combine, outcome)
        return state
