"""Relaxed fallback matching."""

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from app.models.recon import BankTransaction, LedgerTransaction

from .confidence import (
    CombineRule,
    MatchStage,
    MatchState,
    MatchStrategy,
    StageOutcome,
    amount_delta,
    relative_amount_diff,
)
from .similarity import scaled_points, string_similarity

if TYPE_CHECKING:
    from .engine import ReconciliationRun

logger = logging.getLogger(__name__)


class RelaxedMatcher(MatchStrategy):
    """Stage 4: looser amount and wording evidence.

    Points:
    - Amount within 5% of the larger amount: +4
    - Shared words longer than 3 characters: +1 each, max +3
    - Inferred bank vendor vs ledger vendor name similarity x 3, rounded
    """

    stage = MatchStage.RELAXED
    combine = CombineRule.REPLACE

    CLOSE_AMOUNT_TOLERANCE = Decimal("0.05")
    CLOSE_AMOUNT_POINTS = 4

    MIN_WORD_LENGTH = 4
    MAX_WORD_POINTS = 3

    VENDOR_WEIGHT = 3

    def match(
        self,
        transaction: BankTransaction,
        run: "ReconciliationRun",
        state: MatchState,
    ) -> StageOutcome | None:
        bank_vendor = run.knowledge_base.infer_vendor_name(transaction.description)

        best: StageOutcome | None = None
        best_delta: Decimal | None = None

        for index, entry in run.unused_ledger():
            score, reasons = self.score(transaction, entry, bank_vendor)
            if score <= 0:
                continue

            delta = amount_delta(transaction, entry)
            if best is None or score > best.score or (score == best.score and delta < best_delta):
                best = StageOutcome(
                    score=score,
                    ledger_transaction=entry,
                    ledger_index=index,
                    reasons=reasons,
                )
                best_delta = delta

        return best

    def score(
        self,
        transaction: BankTransaction,
        entry: LedgerTransaction,
        bank_vendor: str,
    ) -> tuple[int, list[str]]:
        """Score one ledger record against a bank transaction."""
        score = 0
        reasons = []

        diff = relative_amount_diff(transaction, entry)
        if diff < self.CLOSE_AMOUNT_TOLERANCE:
            score += self.CLOSE_AMOUNT_POINTS
            reasons.append(f"amount_within_{diff * 100:.1f}%")

        word_matches = self.count_shared_words(transaction.description, entry.description)
        if word_matches:
            points = min(word_matches, self.MAX_WORD_POINTS)
            score += points
            reasons.append(f"shared_words:{word_matches}")

        if bank_vendor and entry.vendor_name:
            points = scaled_points(string_similarity(bank_vendor, entry.vendor_name), self.VENDOR_WEIGHT)
            if points:
                score += points
                reasons.append(f"vendor_similarity:+{points}")

        return score, reasons

    def count_shared_words(self, bank_description: str | None, ledger_description: str | None) -> int:
        """Count bank words (with repeats) of 4+ characters found in the ledger text."""
        if not bank_description or not ledger_description:
            return 0
        ledger_words = set(ledger_description.lower().split())
        return sum(
            1
            for word in bank_description.lower().split()
            if len(word) >= self.MIN_WORD_LENGTH and word in ledger_words
        )
