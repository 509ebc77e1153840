"""Match scores, stage outcomes and match results."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any

from app.models.recon import BankTransaction, LedgerTransaction

if TYPE_CHECKING:
    from .engine import ReconciliationRun
    from .rules import KnownVendorRule


class MatchStage(str, Enum):
    """Strategy that produced the final score."""

    KNOWN_VENDOR = "known_vendor"
    CHECK_NUMBER = "check_number"
    HEURISTIC = "heuristic"
    RELAXED = "relaxed"
    FEATURE_OVERLAY = "feature_overlay"
    NONE = "none"


class MatchStatus(str, Enum):
    """Outcome of matching one bank transaction."""

    MATCHED = "Matched"
    UNMATCHED = "Unmatched"


class CombineRule(str, Enum):
    """How a stage outcome is folded into the running best match."""

    # Outcome replaces the running best when its score is strictly higher
    REPLACE = "replace"
    # Outcome score is added to the running score and its candidate adopted
    ADD = "add"


@dataclass
class StageOutcome:
    """Best candidate (and score) a single stage found."""

    score: int
    ledger_transaction: LedgerTransaction
    ledger_index: int | None = None
    reasons: list[str] = field(default_factory=list)
    known_vendor: "KnownVendorRule | None" = None


@dataclass
class MatchState:
    """Running best match for one bank transaction."""

    score: int = 0
    ledger_transaction: LedgerTransaction | None = None
    ledger_index: int | None = None
    stage: MatchStage = MatchStage.NONE
    reasons: list[str] = field(default_factory=list)
    known_vendor: "KnownVendorRule | None" = None

    def apply(self, stage: MatchStage, combine: CombineRule, outcome: StageOutcome) -> bool:
        """Fold a stage outcome into the running state.

        Returns:
            True if the outcome's candidate was adopted
        """
        if combine is CombineRule.ADD:
            if outcome.score <= 0:
                return False
            self.score += outcome.score
        else:
            if outcome.score <= self.score:
                return False
            self.score = outcome.score

        self.ledger_transaction = outcome.ledger_transaction
        self.ledger_index = outcome.ledger_index
        self.stage = stage
        self.known_vendor = outcome.known_vendor
        self.reasons.append(f"{stage.value}:{'+' if combine is CombineRule.ADD else '='}{outcome.score}")
        self.reasons.extend(outcome.reasons)
        return True


class MatchStrategy:
    """One stage of the matching pipeline."""

    stage: MatchStage = MatchStage.NONE
    combine: CombineRule = CombineRule.REPLACE

    def match(
        self,
        transaction: BankTransaction,
        run: "ReconciliationRun",
        state: MatchState,
    ) -> StageOutcome | None:
        raise NotImplementedError


def amount_delta(transaction: BankTransaction, entry: LedgerTransaction) -> Decimal:
    """Absolute difference between bank and ledger magnitudes."""
    return abs(transaction.total_amount - abs(entry.amount))


def relative_amount_diff(transaction: BankTransaction, entry: LedgerTransaction) -> Decimal:
    """Amount difference relative to the larger of the two amounts.

    A zero ledger amount is compared against a floor of 1.
    """
    bank_amount = transaction.total_amount
    ledger_amount = abs(entry.amount)
    denominator = max(bank_amount, ledger_amount or Decimal("1"))
    return abs(bank_amount - ledger_amount) / denominator


@dataclass(frozen=True)
class MatchResult:
    """Result of matching one bank transaction."""

    bank_transaction: BankTransaction
    match_status: MatchStatus
    document_number: str
    matched_ledger_transaction: LedgerTransaction | None = None
    score: int = 0
    stage: MatchStage = MatchStage.NONE
    ledger_index: int | None = None
    position: int = 0
    reasons: tuple[str, ...] = ()

    @property
    def is_matched(self) -> bool:
        return self.match_status is MatchStatus.MATCHED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "bank_transaction": self.bank_transaction.to_dict(),
            "matched_ledger_transaction": (
                self.matched_ledger_transaction.to_dict()
                if self.matched_ledger_transaction is not None
                else None
            ),
            "match_status": self.match_status.value,
            "document_number": self.document_number,
            "score": self.score,
            "stage": self.stage.value,
            "reasons": list(self.reasons),
        }
