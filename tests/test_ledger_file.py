"""Tests for the ledger file reader."""

import pytest

from app.services.errors import InvalidInput
from app.services.ledger_file import read_ledger_rows

LEDGER_CSV = (
    "Vendor ID,Vendor Name,Check Number,Date,Description,G/L Account,Amount,Region\n"
    "DOM,DOMINION ENERGY,DD104,12/03/2024,Electric bill,68300,84.12,SC\n"
    "\n"
    "CIT,CITY OF BARNWELL ACC TAX,1694,12/09/2024,Accommodation tax,75000,75.00,SC\n"
)


class TestReadLedgerRows:
    """Tests for read_ledger_rows."""

    def test_reads_rows_by_header(self):
        """Test rows are keyed by header names and blank lines skipped."""
        rows = read_ledger_rows(LEDGER_CSV)

        assert len(rows) == 2
        assert rows[0]["Vendor ID"] == "DOM"
        assert rows[0]["Amount"] == "84.12"
        assert rows[1]["Check Number"] == "1694"

    def test_keeps_unmapped_columns(self):
        """Test columns outside the ledger header are kept."""
        rows = read_ledger_rows(LEDGER_CSV)

        assert rows[0]["Region"] == "SC"

    def test_bytes_with_bom(self):
        """Test uploaded bytes with a UTF-8 BOM decode cleanly."""
        rows = read_ledger_rows(("\ufeff" + LEDGER_CSV).encode("utf-8"))

        assert rows[0]["Vendor ID"] == "DOM"

    def test_header_whitespace_stripped(self):
        """Test header names are trimmed."""
        rows = read_ledger_rows(" Vendor ID , Amount \nDOM,10\n")

        assert rows == [{"Vendor ID": "DOM", "Amount": "10"}]

    def test_short_rows_padded(self):
        """Test missing trailing cells read as empty text."""
        rows = read_ledger_rows("Vendor ID,Amount,Memo\nDOM,10\n")

        assert rows[0]["Memo"] == ""

    def test_empty_file_rejected(self):
        """Test an empty file is rejected."""
        with pytest.raises(InvalidInput) as exc:
            read_ledger_rows("")

        assert exc.value.message.startswith("Failed to process GL file")

    def test_header_only_rejected(self):
        """Test a file without data rows is rejected."""
        with pytest.raises(InvalidInput):
            read_ledger_rows("Vendor ID,Amount\n\n")

    def test_undecodable_bytes_rejected(self):
        """Test non-UTF-8 uploads are rejected."""
        with pytest.raises(InvalidInput):
            read_ledger_rows(b"\xff\xfe\x00V")
