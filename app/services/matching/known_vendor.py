"""Known-vendor override matching."""

import logging
from typing import TYPE_CHECKING

from app.config import settings
from app.models.recon import BankTransaction, LedgerTransaction

from .confidence import CombineRule, MatchStage, MatchState, MatchStrategy, StageOutcome
from .rules import KnownVendorRule, RuleSet

if TYPE_CHECKING:
    from .engine import ReconciliationRun

logger = logging.getLogger(__name__)


class KnownVendorMatcher(MatchStrategy):
    """Stage 1: named payees from the known-vendor table.

    A hit synthesizes a ledger-like record from the rule with a fixed score;
    no real ledger record is consumed.
    """

    stage = MatchStage.KNOWN_VENDOR
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
        rule = self.rules.find_known_vendor(transaction.description)
        if rule is None:
            return None

        return StageOutcome(
            score=self.SCORE,
            ledger_transaction=self.synthesize(transaction, rule),
            reasons=[f"known_vendor:{rule.vendor_name}"],
            known_vendor=rule,
        )

    def synthesize(self, transaction: BankTransaction, rule: KnownVendorRule) -> LedgerTransaction:
        """Build the ledger record a known vendor's payment would have."""
        return LedgerTransaction(
            vendor_id=rule.vendor_id,
            vendor_name=rule.vendor_name,
            check_name=rule.display_check_name,
            gl_account=rule.gl_account,
            description=transaction.description,
            amount=transaction.total_amount,
            date=transaction.date,
            ap_date_cleared=transaction.date,
            cash_account=settings.cash_account,
            total_paid="0",
            prepayment="FALSE",
            customer_payment="FALSE",
            detailed_payments="Yes",
            number_of_distributions="1",
            discount_amount="0",
            quantity="0",
            stocking_quantity="0",
            um_no_of_stocking_units="1",
            unit_price="0",
            stocking_unit_price="0",
            weight="0",
            used_for_reimbursable_expense="FALSE",
            recur_number="0",
            recur_frequency="0",
            payment_method="Check",
            synthetic=True,
        )
