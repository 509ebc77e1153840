"""Upload file generation from match results."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from app.config import (
    DECEMBER_PERIOD,
    DECEMBER_PERIOD_END,
    JANUARY_PERIOD,
    JANUARY_PERIOD_END,
    LEDGER_HEADER,
    settings,
)
from app.services.documents import Deduplicator, DocumentNumberAssigner
from app.services.matching.confidence import MatchResult
from app.services.matching.rules import RuleSet
from app.services.matching.vendors import VendorInference

logger = logging.getLogger(__name__)

DELIMITER = ","


def bucket_date(date_text: str | None) -> tuple[str, str]:
    """Collapse a statement date into one of the two reporting periods.

    The decision is made on the text alone: a ``12/`` marker means December,
    a ``1/`` or ``jan`` marker means January, anything else defaults to
    December.

    Returns:
        Tuple of (period-end date, fiscal period)
    """
    text = date_text or ""
    if "12/" in text:
        return DECEMBER_PERIOD_END, DECEMBER_PERIOD
    if "1/" in text or "jan" in text.lower():
        return JANUARY_PERIOD_END, JANUARY_PERIOD
    return DECEMBER_PERIOD_END, DECEMBER_PERIOD


@dataclass(frozen=True)
class DisplayFields:
    """Vendor and account values shown on an output row."""

    vendor_id: str
    vendor_name: str
    check_name: str
    gl_account: str


@dataclass
class ReconciliationSummary:
    """Aggregate counts for a run."""

    total_bank_transactions: int
    total_ledger_transactions: int
    matched_transactions: int
    unmatched_transactions: int

    def to_dict(self) -> dict[str, int]:
        return {
            "total_bank_transactions": self.total_bank_transactions,
            "total_ledger_transactions": self.total_ledger_transactions,
            "matched_transactions": self.matched_transactions,
            "unmatched_transactions": self.unmatched_transactions,
        }


class OutputRowGenerator:
    """Turns match results into upload rows.

    Display values resolve in order:
    1. Special-vendor override table
    2. Vendor fields of the matched ledger record
    3. Inferred vendor id mapped through the display-name table, else the
       first three words of the description
    GL account falls back to keyword inference.
    """

    UNKNOWN_VENDOR = "Unknown Vendor"

    def __init__(self, rules: RuleSet, cash_account: str | None = None):
        self.rules = rules
        self.inference = VendorInference(rules)
        self.document_numbers = DocumentNumberAssigner(rules)
        self.cash_account = cash_account or settings.cash_account

    def resolve_display(self, result: MatchResult) -> DisplayFields:
        """Resolve vendor id/name, check name and GL account for a result."""
        description = result.bank_transaction.description
        ledger = result.matched_ledger_transaction

        vendor_id = ledger.vendor_id if ledger else ""
        vendor_name = ledger.vendor_name if ledger else ""
        check_name = ledger.check_name if ledger else ""
        gl_account = ledger.gl_account if ledger else ""

        special = self.rules.find_special_vendor(description)
        if special is not None:
            vendor_id = special.vendor_id
            vendor_name = special.vendor_name
            check_name = special.display_check_name
            gl_account = special.gl_account

        if not vendor_name:
            vendor_id = self.inference.infer_vendor_id(description)
            display = self.rules.vendor_display_names.get(vendor_id)
            if display is not None:
                vendor_name = display.vendor_name
                if display.gl_account:
                    gl_account = display.gl_account
            elif description:
                vendor_name = " ".join(description.split(" ")[:3])
            else:
                vendor_name = self.UNKNOWN_VENDOR
            check_name = vendor_name

        if not gl_account:
            gl_account = self.inference.infer_gl_account(description)

        return DisplayFields(
            vendor_id=vendor_id,
            vendor_name=vendor_name,
            check_name=check_name,
            gl_account=gl_account,
        )

    def build_row(self, position: int, result: MatchResult) -> list[str]:
        """Column values for one result, in header order."""
        transaction = result.bank_transaction
        display = self.resolve_display(result)
        formatted_date, period = bucket_date(transaction.date)
        amount = f"{abs(transaction.total_amount):.2f}"
        document_number = result.document_number or self.document_numbers.assign(
            position, transaction, result.matched_ledger_transaction
        )

        return [
            display.vendor_id,
            display.vendor_name,
            display.check_name,
            "",  # Check Address-Line One
            "",  # Check Address-Line Two
            "",  # Check City
            "",  # Check State
            "",  # Check Zipcode
            "",  # Check Country
            document_number,
            formatted_date,
            "",  # Memo
            self.cash_account,
            "0",  # Total Paid on Invoice(s)
            "",  # Discount Account
            "FALSE",  # Prepayment
            "FALSE",  # Customer Payment
            formatted_date,  # AP Date Cleared in Bank Rec
            "Yes",  # Detailed Payments
            "1",  # Number of Distributions
            "",  # Invoice Paid
            "0",  # Discount Amount
            "0",  # Quantity
            "0",  # Stocking Quantity
            "",  # Item ID
            "",  # Serial Number
            "",  # U/M ID
            "1",  # U/M No. of Stocking Units
            transaction.description,
            display.gl_account,
            "0",  # Unit Price
            "0",  # Stocking Unit Price
            "",  # UPC / SKU
            "0",  # Weight
            amount,
            "",  # Job ID
            "FALSE",  # Used for Reimbursable Expense
            period,
            str(position + 1),  # Transaction Number
            "",  # Voided by Transaction
            "0",  # Recur Number
            "0",  # Recur Frequency
            "Check",  # Payment Method
        ]

    def generate_rows(self, results: Sequence[MatchResult]) -> list[list[str]]:
        """Rows for every result, skipping repeats of (date, description, amount)."""
        seen = Deduplicator()
        rows = []
        for position, result in enumerate(results):
            transaction = result.bank_transaction
            formatted_date, _ = bucket_date(transaction.date)
            key = f"{formatted_date}-{transaction.description}-{abs(transaction.total_amount):.2f}"
            if seen.is_duplicate(key):
                logger.info(f"Skipping duplicate output row: {key}")
                continue
            rows.append(self.build_row(position, result))
        return rows

    def generate_csv(self, results: Sequence[MatchResult]) -> str:
        """Header plus one comma-joined line per row.

        Values are joined as-is, without quoting.
        """
        lines = [DELIMITER.join(LEDGER_HEADER)]
        lines.extend(DELIMITER.join(row) for row in self.generate_rows(results))
        return "\n".join(lines)

    @staticmethod
    def summarize(
        results: Sequence[MatchResult],
        total_bank_transactions: int,
        total_ledger_transactions: int,
    ) -> ReconciliationSummary:
        matched = sum(1 for r in results if r.is_matched)
        return ReconciliationSummary(
            total_bank_transactions=total_bank_transactions,
            total_ledger_transactions=total_ledger_transactions,
            matched_transactions=matched,
            unmatched_transactions=len(results) - matched,
        )
