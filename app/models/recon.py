"""Transaction records exchanged between reconciliation stages."""

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class BankTransaction:
    """Canonical bank statement line.

    Exactly one of ``debit_amount``/``credit_amount`` is set; ``total_amount``
    is the absolute magnitude used for matching.
    """

    date: str
    description: str
    total_amount: Decimal
    debit_amount: Decimal | None = None
    credit_amount: Decimal | None = None

    @property
    def is_debit(self) -> bool:
        return self.debit_amount is not None

    @property
    def dedup_key(self) -> str:
        """Key identifying duplicate statement lines within a batch."""
        return f"{self.description}-{self.total_amount:.2f}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (lower-case field convention)."""
        return {
            "date": self.date,
            "description": self.description,
            "debit": str(self.debit_amount) if self.debit_amount is not None else None,
            "credit": str(self.credit_amount) if self.credit_amount is not None else None,
            "amount": str(self.total_amount),
        }

    def __repr__(self) -> str:
        side = "DEBIT" if self.is_debit else "CREDIT"
        return f"<BankTransaction {self.date} {side} {self.total_amount} {self.description!r}>"


@dataclass(frozen=True)
class LedgerTransaction:
    """Accounts-payable ledger entry.

    Every column of the ledger header maps to a field; ``amount`` is parsed,
    everything else is kept as text. Columns outside the header are kept in
    ``extra`` and the raw row in ``original_row``.
    """

    vendor_id: str = ""
    vendor_name: str = ""
    check_name: str = ""
    check_address_line1: str = ""
    check_address_line2: str = ""
    check_city: str = ""
    check_state: str = ""
    check_zipcode: str = ""
    check_country: str = ""
    check_number: str = ""
    date: str = ""
    memo: str = ""
    cash_account: str = ""
    total_paid: str = ""
    discount_account: str = ""
    prepayment: str = ""
    customer_payment: str = ""
    ap_date_cleared: str = ""
    detailed_payments: str = ""
    number_of_distributions: str = ""
    invoice_paid: str = ""
    discount_amount: str = ""
    quantity: str = ""
    stocking_quantity: str = ""
    item_id: str = ""
    serial_number: str = ""
    um_id: str = ""
    um_no_of_stocking_units: str = ""
    description: str = ""
    gl_account: str = ""
    unit_price: str = ""
    stocking_unit_price: str = ""
    upc_sku: str = ""
    weight: str = ""
    amount: Decimal = Decimal("0")
    job_id: str = ""
    used_for_reimbursable_expense: str = ""
    transaction_period: str = ""
    transaction_number: str = ""
    voided_by_transaction: str = ""
    recur_number: str = ""
    recur_frequency: str = ""
    payment_method: str = ""

    # Audit passthrough
    extra: dict[str, str] = field(default_factory=dict)
    original_row: str = ""

    # Built from a known-vendor rule rather than read from the ledger
    synthetic: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["amount"] = str(self.amount)
        return data

    def __repr__(self) -> str:
        return f"<LedgerTransaction {self.vendor_id or '-'} {self.check_number or '-'} {self.amount}>"
