"""Primary heuristic scoring for bank transactions."""

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
)
from .similarity import compare_features, days_apart, extract_features, scaled_points, string_similarity

if TYPE_CHECKING:
    from .engine import ReconciliationRun

logger = logging.getLogger(__name__)


class HeuristicMatcher(MatchStrategy):
    """Stage 3: composite score against every unused ledger record.

    Points:
    - Amount exact (within a cent, exclusive): +5
    - Description similarity >0.8 / >0.6 / >0.4: +4 / +3 / +2
    - Ledger vendor name in bank description: +3
    - Ledger vendor id in bank description: +3
    - Date same day / within 3 days / within 7 days: +3 / +2 / +1
    - Feature similarity x 3, rounded
    """

    stage = MatchStage.HEURISTIC
    combine = CombineRule.REPLACE

    AMOUNT_TOLERANCE = Decimal("0.01")
    AMOUNT_POINTS = 5

    # (minimum similarity, exclusive) -> points, highest tier first
    DESCRIPTION_TIERS = ((0.8, 4), (0.6, 3), (0.4, 2))

    VENDOR_NAME_POINTS = 3
    VENDOR_ID_POINTS = 3

    # (maximum days apart, inclusive) -> points
    DATE_TIERS = ((0, 3), (3, 2), (7, 1))

    FEATURE_WEIGHT = 3

    def match(
        self,
        transaction: BankTransaction,
        run: "ReconciliationRun",
        state: MatchState,
    ) -> StageOutcome | None:
        bank_features = extract_features(transaction.description)

        best: StageOutcome | None = None
        best_delta: Decimal | None = None

        for index, entry in run.unused_ledger():
            score, reasons = self.score(transaction, entry, bank_features)
            if score <= 0:
                continue

            # Equal scores prefer the closer amount, then scan order
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
        bank_features: dict[str, bool] | None = None,
    ) -> tuple[int, list[str]]:
        """Score one ledger record against a bank transaction."""
        score = 0
        reasons = []
        description = transaction.description or ""
        description_lower = description.lower()

        if amount_delta(transaction, entry) < self.AMOUNT_TOLERANCE:
            score += self.AMOUNT_POINTS
            reasons.append("amount_exact")

        similarity = string_similarity(description, entry.description) if entry.description else 0.0
        for threshold, points in self.DESCRIPTION_TIERS:
            if similarity > threshold:
                score += points
                reasons.append(f"description_similarity_{int(similarity * 100)}%")
                break

        if description and entry.vendor_name and entry.vendor_name.lower() in description_lower:
            score += self.VENDOR_NAME_POINTS
            reasons.append("vendor_name_in_description")

        if description and entry.vendor_id and entry.vendor_id.lower() in description_lower:
            score += self.VENDOR_ID_POINTS
            reasons.append("vendor_id_in_description")

        days = days_apart(transaction.date, entry.date)
        if days is not None:
            for max_days, points in self.DATE_TIERS:
                if days <= max_days:
                    score += points
                    reasons.append(f"date_within_{int(days)}_days")
                    break

        if bank_features is None:
            bank_features = extract_features(description)
        feature_points = scaled_points(
            compare_features(bank_features, extract_features(entry.description)),
            self.FEATURE_WEIGHT,
        )
        if feature_points:
            score += feature_points
            reasons.append(f"features:+{feature_points}")

        return score, reasons
