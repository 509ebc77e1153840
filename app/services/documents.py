"""Duplicate suppression and document-number assignment."""

import logging
import re
from typing import TYPE_CHECKING

from app.models.recon import BankTransaction, LedgerTransaction

if TYPE_CHECKING:
    from app.services.matching.rules import RuleSet

logger = logging.getLogger(__name__)

# Check numbers in use run 1000-1999
CHECK_NUMBER_PATTERN = re.compile(r"\b(1\d{3})\b")


def find_check_number(description: str | None) -> str:
    """Extract an explicit 4-digit check number from a description."""
    if not description:
        return ""
    match = CHECK_NUMBER_PATTERN.search(description)
    return match.group(1) if match else ""


class Deduplicator:
    """Remembers keys seen during one run."""

    def __init__(self):
        self.seen: set[str] = set()

    def is_duplicate(self, key: str) -> bool:
        """Check a key, recording it when first seen."""
        if key in self.seen:
            return True
        self.seen.add(key)
        return False

    def __len__(self) -> int:
        return len(self.seen)


class DocumentNumberAssigner:
    """Assigns the check/reference number shown on an output row.

    Policy, by bank description:
    1. Check payee: explicit 4-digit check number, else a reserved number of
       the matching known vendor (cycled by position), else 1339 + position
       mod 30.
    2. Paid by check (keyword, or matched ledger check number without the
       direct-deposit prefix): the ledger check number, else CHK###.
    3. Otherwise: a DD-prefixed ledger check number, else DD###.
    """

    DIRECT_DEPOSIT_PREFIX = "DD"
    CHECK_PREFIX = "CHK"

    SYNTHETIC_CHECK_BASE = 1339
    SYNTHETIC_CHECK_RANGE = 30

    def __init__(self, rules: "RuleSet"):
        self.rules = rules

    def assign(
        self,
        position: int,
        transaction: BankTransaction,
        matched: LedgerTransaction | None = None,
    ) -> str:
        """Document number for the bank transaction at ``position`` (0-based)."""
        description = transaction.description

        if self.rules.is_check_payee(description):
            return self._check_payee_number(position, description)

        ledger_number = matched.check_number if matched is not None else ""
        is_direct_deposit = ledger_number.startswith(self.DIRECT_DEPOSIT_PREFIX)

        if self.rules.is_check_paid(description) or (ledger_number and not is_direct_deposit):
            if ledger_number and not is_direct_deposit:
                return ledger_number
            return f"{self.CHECK_PREFIX}{position + 1:03d}"

        if ledger_number and is_direct_deposit:
            return ledger_number
        return f"{self.DIRECT_DEPOSIT_PREFIX}{position + 1:03d}"

    def _check_payee_number(self, position: int, description: str) -> str:
        explicit = find_check_number(description)
        if explicit:
            return explicit

        for rule in self.rules.known_vendors:
            if rule.matches(description) and rule.reserved_check_numbers:
                numbers = rule.reserved_check_numbers
                return numbers[position % len(numbers)]

        return str(self.SYNTHETIC_CHECK_BASE + position % self.SYNTHETIC_CHECK_RANGE)
