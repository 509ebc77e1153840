"""Direct check-number matching."""

import logging
from typing import TYPE_CHECKING

from app.models.recon import BankTransaction
from app.services.documents import find_check_number

from .confidence import CombineRule, MatchStage, MatchState, MatchStrategy, StageOutcome
from .rules import RuleSet

if TYPE_CHECKING:
    from .engine import ReconciliationRun

logger = logging.getLogger(__name__)


class CheckNumberMatcher(MatchStrategy):
    """Stage 2: check-style payments carrying their check number.

    Applies only to descriptions naming a check payee; the first unused ledger
    record with an equal check number wins.
    """

    stage = MatchStage.CHECK_NUMBER
    combine = CombineRule.REPLACE

    SCORE = 10

    def __init__(self, rules: RuleSet):
        self.rules = rules

    def match(
        self,
        transaction: BankTransaction,
        run: "ReconciliationRun",
        state: MatchState,
    ) -> StageOutcome | None:
        if not self.rules.is_check_payee(transaction.description):
            return None

        check_number = find_check_number(transaction.description)
        if not check_number:
            return None

        for index, entry in run.unused_ledger():
            if entry.check_number == check_number:
                return StageOutcome(
                    score=self.SCORE,
                    ledger_transaction=entry,
                    ledger_index=index,
                    reasons=[f"check_number:{check_number}"],
                )

        logger.debug(f"No unused ledger entry for check {check_number}")
        return None
