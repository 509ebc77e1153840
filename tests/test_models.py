"""Tests for reconciliation records."""

from decimal import Decimal

from app.models.recon import BankTransaction, LedgerTransaction


class TestBankTransaction:
    """Tests for BankTransaction."""

    def test_debit_transaction(self):
        """Test a debit line reports its side and magnitude."""
        tx = BankTransaction(
            date="12/05/2024",
            description="DOMINION ENERGY",
            total_amount=Decimal("84.12"),
            debit_amount=Decimal("84.12"),
        )

        assert tx.is_debit
        assert tx.credit_amount is None
        assert tx.dedup_key == "DOMINION ENERGY-84.12"

    def test_credit_transaction(self):
        """Test a credit line is not a debit."""
        tx = BankTransaction(
            date="1/02/2025",
            description="DEPOSIT",
            total_amount=Decimal("250"),
            credit_amount=Decimal("250"),
        )

        assert not tx.is_debit
        assert tx.dedup_key == "DEPOSIT-250.00"

    def test_to_dict(self):
        """Test conversion to the lower-case convention."""
        tx = BankTransaction(
            date="12/05/2024",
            description="LOAN $490",
            total_amount=Decimal("490.00"),
            debit_amount=Decimal("490.00"),
        )

        data = tx.to_dict()
        assert data == {
            "date": "12/05/2024",
            "description": "LOAN $490",
            "debit": "490.00",
            "credit": None,
            "amount": "490.00",
        }

    def test_transaction_repr(self):
        """Test string representation."""
        tx = BankTransaction(
            date="12/05/2024",
            description="RENT",
            total_amount=Decimal("1200"),
            debit_amount=Decimal("1200"),
        )

        text = repr(tx)
        assert "DEBIT" in text
        assert "1200" in text
        assert "'RENT'" in text


class TestLedgerTransaction:
    """Tests for LedgerTransaction."""

    def test_defaults(self):
        """Test every text field defaults to empty and amount to zero."""
        entry = LedgerTransaction()

        assert entry.vendor_id == ""
        assert entry.payment_method == ""
        assert entry.amount == Decimal("0")
        assert entry.extra == {}
        assert not entry.synthetic

    def test_to_dict(self):
        """Test amount is serialized as text and audit fields are kept."""
        entry = LedgerTransaction(
            vendor_id="DOM",
            vendor_name="DOMINION ENERGY",
            amount=Decimal("84.12"),
            extra={"Region": "SC"},
            original_row='{"Vendor ID": "DOM"}',
        )

        data = entry.to_dict()
        assert data["vendor_id"] == "DOM"
        assert data["amount"] == "84.12"
        assert data["extra"] == {"Region": "SC"}
        assert data["original_row"] == '{"Vendor ID": "DOM"}'
        assert data["synthetic"] is False

    def test_repr(self):
        """Test string representation."""
        entry = LedgerTransaction(vendor_id="CIT", check_number="1694", amount=Decimal("75"))

        assert repr(entry) == "<LedgerTransaction CIT 1694 75>"
