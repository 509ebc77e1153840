"""Tests for the reconciliation orchestrator."""

import json
from unittest.mock import patch

import pytest

from app.services.errors import EmptyBatch, GenerationFailure, InvalidInput, MatchingFailure
from app.services.reconcile import ReconciliationOrchestrator

BANK = [
    {"DATE": "12/12", "DESCRIPTION": "CHECK 1690 SUNIL KUMAR TADAMATTA CHRISTOPHER", "DEBITS": "500.00"},
    {"DATE": "12/03", "DESCRIPTION": "DOMINION ENERGY", "DEBITS": "84.12"},
    {"DATE": "12/03", "DESCRIPTION": "DOMINION ENERGY", "DEBITS": "84.12"},
    {"DATE": "1/05", "DESCRIPTION": "ZZZ QQQ 12345", "DEBITS": "1,000.00"},
]

LEDGER = [
    {
        "Vendor ID": "DOM",
        "Vendor Name": "DOMINION ENERGY",
        "Check Number": "DD104",
        "Date": "12/03/2024",
        "Description": "DOMINION ENERGY",
        "G/L Account": "68300",
        "Amount": "84.12",
    },
    {"Description": "Office rent January", "G/L Account": "67000", "Amount": "2500.00"},
]


@pytest.fixture
def orchestrator(rules):
    return ReconciliationOrchestrator(rules=rules)


class TestReconciliationOrchestrator:
    """Tests for ReconciliationOrchestrator."""

    def test_reconcile(self, orchestrator):
        """Test a full run over raw records."""
        result = orchestrator.reconcile(BANK, LEDGER, "Barnwell Motel")

        assert [r.match_status.value for r in result.results] == ["Matched", "Matched", "Unmatched"]
        assert result.results[1].document_number == "DD104"
        assert result.summary.total_bank_transactions == 4
        assert result.summary.total_ledger_transactions == 2
        assert result.summary.matched_transactions == 2
        assert result.summary.unmatched_transactions == 1
        assert len(result.csv_content.split("\n")) == 4
        assert result.company_name == "Barnwell Motel"

    def test_to_dict(self, orchestrator):
        """Test the response shape."""
        data = orchestrator.reconcile(BANK, LEDGER).to_dict()

        assert data["success"] is True
        assert data["company_name"] == "Company"
        assert data["stats"]["matched_transactions"] == 2
        first = data["comparison_results"][0]
        assert first["formatted_date"] == "12/31/2024"
        assert first["document_number"] == "1690"
        assert data["comparison_results"][2]["formatted_date"] == "1/31/2025"

    def test_missing_input(self, orchestrator):
        """Test missing batches are rejected."""
        with pytest.raises(InvalidInput) as exc:
            orchestrator.reconcile([], LEDGER)
        assert exc.value.message == "Missing bank data or GL file"

        with pytest.raises(InvalidInput):
            orchestrator.reconcile(BANK, None)

    def test_no_valid_ledger(self, orchestrator):
        """Test a ledger with nothing usable is rejected."""
        with pytest.raises(EmptyBatch):
            orchestrator.reconcile(BANK, [{"Vendor ID": ""}])

    def test_batch_limit(self, orchestrator):
        """Test oversized batches are rejected."""
        orchestrator.max_bank_transactions = 2

        with pytest.raises(InvalidInput) as exc:
            orchestrator.reconcile(BANK, LEDGER)

        assert "Too many bank transactions" in exc.value.message

    def test_matching_failure(self, orchestrator):
        """Test unexpected scoring errors surface as one generic failure."""
        with patch.object(orchestrator.engine, "reconcile", side_effect=RuntimeError("boom")):
            with pytest.raises(MatchingFailure) as exc:
                orchestrator.reconcile(BANK, LEDGER)

        assert exc.value.status_code == 500
        assert exc.value.message == "Error comparing transactions"
        assert isinstance(exc.value.__cause__, RuntimeError)

    def test_generation_failure(self, orchestrator):
        """Test unexpected generation errors surface as one generic failure."""
        with patch.object(orchestrator.generator, "generate_csv", side_effect=KeyError("column")):
            with pytest.raises(GenerationFailure) as exc:
                orchestrator.reconcile(BANK, LEDGER)

        assert exc.value.status_code == 500
        assert exc.value.message == "Error generating CSV"


class TestReconcileUpload:
    """Tests for the JSON-plus-file entry point."""

    LEDGER_CSV = (
        "Vendor ID,Vendor Name,Check Number,Date,Description,G/L Account,Amount\n"
        "DOM,DOMINION ENERGY,DD104,12/03/2024,DOMINION ENERGY,68300,84.12\n"
    )

    def test_upload(self, orchestrator):
        """Test bank JSON text and ledger file bytes."""
        result = orchestrator.reconcile_upload(json.dumps(BANK), self.LEDGER_CSV.encode())

        assert result.summary.total_ledger_transactions == 1
        assert result.results[1].matched_ledger_transaction.vendor_id == "DOM"

    def test_invalid_json(self, orchestrator):
        """Test unreadable bank JSON is rejected."""
        with pytest.raises(InvalidInput) as exc:
            orchestrator.reconcile_upload("[{not json", self.LEDGER_CSV)

        assert exc.value.message.startswith("Invalid bank data format")

    def test_bank_json_not_a_list(self, orchestrator):
        """Test a JSON object instead of a list is rejected."""
        with pytest.raises(InvalidInput):
            orchestrator.reconcile_upload('{"DESCRIPTION": "X"}', self.LEDGER_CSV)

    @pytest.mark.parametrize("bank_data", ["5", "true", "12.5", '"text"'])
    def test_bank_json_scalar(self, orchestrator, bank_data):
        """Test a JSON scalar instead of a list is rejected."""
        with pytest.raises(InvalidInput) as exc:
            orchestrator.reconcile_upload(bank_data, self.LEDGER_CSV)

        assert exc.value.message.startswith("Invalid bank data format")
        assert exc.value.status_code == 400

    def test_missing_file(self, orchestrator):
        """Test a missing ledger file is rejected."""
        with pytest.raises(InvalidInput) as exc:
            orchestrator.reconcile_upload(json.dumps(BANK), b"")

        assert exc.value.message == "Missing bank data or GL file"
