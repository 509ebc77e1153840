"""Bank and ledger record normalization."""

import json
import logging
import re
from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

from app.config import LEDGER_COLUMNS, settings
from app.models.recon import BankTransaction, LedgerTransaction

from .errors import EmptyBatch, InvalidInput

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

_NON_NUMERIC = re.compile(r"[^\d.-]")

# Passthrough keys produced by LedgerTransaction.to_dict()
_LEDGER_AUDIT_FIELDS = ("extra", "original_row", "synthetic")


def parse_amount(value: Any) -> Decimal:
    """Parse a monetary value, falling back to zero.

    Strings are stripped of everything except digits, ``.`` and ``-`` so that
    ``"$1,234.50"`` parses as ``1234.50``.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    else:
        cleaned = _NON_NUMERIC.sub("", str(value))
        if not cleaned:
            return ZERO
        try:
            amount = Decimal(cleaned)
        except InvalidOperation:
            return ZERO
    if not amount.is_finite():
        return ZERO
    return amount


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class RecordNormalizer:
    """Validates and canonicalizes raw bank and ledger batches.

    Bank records are accepted in two conventions:
    - lower-case ``date/description/debit/credit/amount``
    - upper-case ``DATE/DESCRIPTION/DEBITS/CREDITS`` (extraction output)
    """

    UPPER_CASE_AMOUNT_KEYS = ("DEBITS", "CREDITS")

    def __init__(self, placeholder_marker: str | None = None):
        self.placeholder_marker = (
            placeholder_marker if placeholder_marker is not None else settings.placeholder_marker
        )

    def is_placeholder(self, record: Any) -> bool:
        """Check if a record is the extraction service's placeholder row."""
        if not self.placeholder_marker:
            return False
        if isinstance(record, BankTransaction):
            return self.placeholder_marker in record.description
        if not isinstance(record, Mapping):
            return False
        for key in ("description", "DESCRIPTION"):
            value = record.get(key)
            if value and self.placeholder_marker in str(value):
                return True
        return False

    def normalize_bank_record(self, record: Any) -> BankTransaction | None:
        """Normalize one bank record, or return None if it must be dropped."""
        if not record:
            return None
        if self.is_placeholder(record):
            return None

        if isinstance(record, BankTransaction):
            return record if record.total_amount > 0 else None

        if not isinstance(record, Mapping):
            logger.debug(f"Dropping non-mapping bank record: {record!r}")
            return None

        date = _text(record.get("date") or record.get("DATE"))
        description = str(record.get("description") or record.get("DESCRIPTION") or "")

        if any(key in record for key in self.UPPER_CASE_AMOUNT_KEYS):
            debit = abs(parse_amount(record.get("DEBITS")))
            credit = abs(parse_amount(record.get("CREDITS")))
            amount = ZERO
        else:
            debit = abs(parse_amount(record.get("debit")))
            credit = abs(parse_amount(record.get("credit")))
            amount = abs(parse_amount(record.get("amount")))

        if debit > 0 and debit >= credit:
            return BankTransaction(
                date=date, description=description, total_amount=debit, debit_amount=debit
            )
        if credit > 0:
            return BankTransaction(
                date=date, description=description, total_amount=credit, credit_amount=credit
            )
        if amount > 0:
            # Amount-only records carry no side; treat them as money out
            return BankTransaction(
                date=date, description=description, total_amount=amount, debit_amount=amount
            )
        return None

    def normalize_bank_batch(self, raw_records: Sequence[Any] | None) -> list[BankTransaction]:
        """Normalize a bank batch, dropping placeholder and amountless records.

        Raises:
            InvalidInput: If the batch is missing or not a list
            EmptyBatch: If no valid transaction survives filtering
        """
        if not isinstance(raw_records, (list, tuple)):
            raise InvalidInput("Invalid bank data format: expected a list of transactions")

        raw = list(raw_records)
        if raw and all(self.is_placeholder(r) for r in raw):
            raise EmptyBatch(
                "No actual bank transactions found. Please upload valid bank statements "
                "with real transaction data."
            )

        transactions = []
        for record in raw:
            tx = self.normalize_bank_record(record)
            if tx is not None:
                transactions.append(tx)

        dropped = len(raw) - len(transactions)
        if dropped:
            logger.info(f"Dropped {dropped} invalid or placeholder bank records")

        if not transactions:
            raise EmptyBatch(
                "No valid bank transactions to process. Please upload statements "
                "with actual transaction data."
            )
        return transactions

    def normalize_ledger_record(self, row: Any) -> LedgerTransaction | None:
        """Map a ledger row keyed by header names (or field names) to a record."""
        if isinstance(row, LedgerTransaction):
            return row
        if not row or not isinstance(row, Mapping):
            return None

        values: dict[str, Any] = {}
        for column, field_name in LEDGER_COLUMNS.items():
            if column in row:
                values[field_name] = row[column]
            elif field_name in row:
                values[field_name] = row[field_name]

        known_keys = set(LEDGER_COLUMNS) | set(LEDGER_COLUMNS.values()) | set(_LEDGER_AUDIT_FIELDS)
        extra = {str(k): _text(v) for k, v in row.items() if k not in known_keys and k is not None}
        extra.update(row.get("extra") or {})

        if not any(_text(v) for v in values.values()) and not any(extra.values()):
            return None

        fields = {name: _text(value) for name, value in values.items() if name != "amount"}
        original_row = row.get("original_row")
        if original_row is None:
            original_row = json.dumps({str(k): v for k, v in row.items()}, default=str)

        return LedgerTransaction(
            **fields,
            amount=parse_amount(values.get("amount")),
            extra=extra,
            original_row=original_row,
            synthetic=bool(row.get("synthetic", False)),
        )

    def normalize_ledger_batch(self, raw_rows: Sequence[Any] | None) -> list[LedgerTransaction]:
        """Normalize a ledger batch.

        Raises:
            InvalidInput: If the batch is missing
            EmptyBatch: If no row carries any data
        """
        if not isinstance(raw_rows, (list, tuple)):
            raise InvalidInput("Invalid ledger data format: expected a list of rows")

        transactions = []
        for row in raw_rows:
            tx = self.normalize_ledger_record(row)
            if tx is not None:
                transactions.append(tx)

        if not transactions:
            raise EmptyBatch("No valid GL transactions found in file")
        return transactions
