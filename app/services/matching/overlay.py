"""Feature-overlay fallback matching."""

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
    relative_amount_diff,
)
from .similarity import compare_features, extract_features, scaled_points, string_similarity

if TYPE_CHECKING:
    from .engine import ReconciliationRun

logger = logging.getLogger(__name__)


class FeatureOverlayMatcher(MatchStrategy):
    """Stage 5: additive evidence layered onto the running score.

    Each unused ledger record earns a contribution from:
    - Inferred vendor id exact / similar (>0.5): +3 / +2
    - Inferred GL account exact / 3-character prefix: +3 / +2
    - Feature similarity x 3, rounded
    - Amount within 10% of the larger amount: +2

    Contributions are cumulative across the scan: every record with a
    positive contribution adds it to the running score and becomes the
    candidate, so the last such record in scan order is the one adopted.
    """

    stage = MatchStage.FEATURE_OVERLAY
    combine = CombineRule.ADD

    VENDOR_EXACT_POINTS = 3
    VENDOR_SIMILAR_POINTS = 2
    VENDOR_SIMILARITY_THRESHOLD = 0.5

    GL_EXACT_POINTS = 3
    GL_PREFIX_POINTS = 2
    GL_PREFIX_LENGTH = 3

    FEATURE_WEIGHT = 3

    BROAD_AMOUNT_TOLERANCE = Decimal("0.10")
    BROAD_AMOUNT_POINTS = 2

    def match(
        self,
        transaction: BankTransaction,
        run: "ReconciliationRun",
        state: MatchState,
    ) -> StageOutcome | None:
        kb = run.knowledge_base
        bank_vendor_id = kb.infer_vendor_id(transaction.description)
        bank_gl_account = kb.infer_gl_account(transaction.description)
        bank_features = extract_features(transaction.description)

        total = 0
        adopted: StageOutcome | None = None

        for index, entry in run.unused_ledger():
            contribution, reasons = self.score(
                transaction, entry, bank_vendor_id, bank_gl_account, bank_features
            )
            if contribution <= 0:
                continue
            total += contribution
            adopted = StageOutcome(
                score=total,
                ledger_transaction=entry,
                ledger_index=index,
                reasons=reasons,
            )

        return adopted

    def score(
        self,
        transaction: BankTransaction,
        entry: LedgerTransaction,
        bank_vendor_id: str,
        bank_gl_account: str,
        bank_features: dict[str, bool],
    ) -> tuple[int, list[str]]:
        """Incremental contribution of one ledger record."""
        score = 0
        reasons = []

        if bank_vendor_id and entry.vendor_id:
            if bank_vendor_id == entry.vendor_id:
                score += self.VENDOR_EXACT_POINTS
                reasons.append("vendor_id_exact")
            elif string_similarity(bank_vendor_id, entry.vendor_id) > self.VENDOR_SIMILARITY_THRESHOLD:
                score += self.VENDOR_SIMILAR_POINTS
                reasons.append("vendor_id_similar")

        if bank_gl_account and entry.gl_account:
            if bank_gl_account == entry.gl_account:
                score += self.GL_EXACT_POINTS
                reasons.append("gl_account_exact")
            elif bank_gl_account.startswith(
                entry.gl_account[: self.GL_PREFIX_LENGTH]
            ) or entry.gl_account.startswith(bank_gl_account[: self.GL_PREFIX_LENGTH]):
                score += self.GL_PREFIX_POINTS
                reasons.append("gl_account_prefix")

        feature_points = scaled_points(
            compare_features(bank_features, extract_features(entry.description)),
            self.FEATURE_WEIGHT,
        )
        if feature_points:
            score += feature_points
            reasons.append(f"features:+{feature_points}")

        if relative_amount_diff(transaction, entry) < self.BROAD_AMOUNT_TOLERANCE:
            score += self.BROAD_AMOUNT_POINTS
            reasons.append("amount_within_10%")

        return score, reasons
