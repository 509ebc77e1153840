"""Tests for API endpoints."""

import json
from unittest.mock import MagicMock

import pytest

from app.api.reconcile import get_orchestrator
from app.main import app
from app.services.reconcile import ReconciliationOrchestrator

BANK = [
    {"DATE": "12/12", "DESCRIPTION": "CHECK 1690 SUNIL KUMAR TADAMATTA CHRISTOPHER", "DEBITS": "500.00"},
    {"DATE": "12/03", "DESCRIPTION": "DOMINION ENERGY", "DEBITS": "84.12"},
]

LEDGER_CSV = (
    "Vendor ID,Vendor Name,Check Number,Date,Description,G/L Account,Amount\n"
    "DOM,DOMINION ENERGY,DD104,12/03/2024,DOMINION ENERGY,68300,84.12\n"
)

PLACEHOLDER = "Default transaction - please replace with actual data"


@pytest.fixture
def broken_orchestrator():
    """Route requests to an orchestrator whose engine always fails."""
    orchestrator = ReconciliationOrchestrator()
    orchestrator.engine.reconcile = MagicMock(side_effect=RuntimeError("boom"))
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield orchestrator
    app.dependency_overrides.pop(get_orchestrator, None)


class TestCompareAPI:
    """Tests for the multipart compare endpoint."""

    @pytest.mark.asyncio
    async def test_compare(self, client):
        """Test a bank batch against an uploaded GL file."""
        response = await client.post(
            "/api/recon/compare",
            data={"bankData": json.dumps(BANK), "companyName": "Barnwell Motel"},
            files={"glFile": ("gl.csv", LEDGER_CSV.encode(), "text/csv")},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["company_name"] == "Barnwell Motel"
        assert data["stats"] == {
            "total_bank_transactions": 2,
            "total_ledger_transactions": 1,
            "matched_transactions": 2,
            "unmatched_transactions": 0,
        }
        assert data["comparison_results"][0]["document_number"] == "1690"
        assert data["comparison_results"][1]["matched_ledger_transaction"]["vendor_id"] == "DOM"
        assert data["csv_content"].startswith("Vendor ID,Vendor Name,")

    @pytest.mark.asyncio
    async def test_compare_missing_file(self, client):
        """Test a request without a GL file."""
        response = await client.post("/api/recon/compare", data={"bankData": json.dumps(BANK)})

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing bank data or GL file"

    @pytest.mark.asyncio
    async def test_compare_invalid_bank_json(self, client):
        """Test unreadable bank data."""
        response = await client.post(
            "/api/recon/compare",
            data={"bankData": "[{"},
            files={"glFile": ("gl.csv", LEDGER_CSV.encode(), "text/csv")},
        )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid bank data format")

    @pytest.mark.asyncio
    async def test_compare_scalar_bank_json(self, client):
        """Test bank data that parses to a bare number."""
        response = await client.post(
            "/api/recon/compare",
            data={"bankData": "5"},
            files={"glFile": ("gl.csv", LEDGER_CSV.encode(), "text/csv")},
        )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid bank data format")

    @pytest.mark.asyncio
    async def test_compare_only_placeholders(self, client):
        """Test a batch holding only extraction placeholders."""
        response = await client.post(
            "/api/recon/compare",
            data={"bankData": json.dumps([{"DESCRIPTION": PLACEHOLDER, "DEBITS": "1.00"}])},
            files={"glFile": ("gl.csv", LEDGER_CSV.encode(), "text/csv")},
        )

        assert response.status_code == 400
        assert "No actual bank transactions found" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_compare_unreadable_file(self, client):
        """Test an empty GL file."""
        response = await client.post(
            "/api/recon/compare",
            data={"bankData": json.dumps(BANK)},
            files={"glFile": ("gl.csv", b"\n", "text/csv")},
        )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Failed to process GL file")

    @pytest.mark.asyncio
    async def test_compare_matching_failure(self, client, broken_orchestrator):
        """Test internal failures return a generic 500."""
        response = await client.post(
            "/api/recon/compare",
            data={"bankData": json.dumps(BANK)},
            files={"glFile": ("gl.csv", LEDGER_CSV.encode(), "text/csv")},
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Error comparing transactions"


class TestReconcileAPI:
    """Tests for the JSON reconcile endpoint."""

    @pytest.mark.asyncio
    async def test_reconcile(self, client):
        """Test reconciliation from JSON batches."""
        response = await client.post(
            "/api/recon/reconcile",
            json={
                "bank_transactions": BANK,
                "ledger_transactions": [
                    {"Vendor ID": "DOM", "Check Number": "DD104", "Amount": "84.12", "Description": "DOMINION ENERGY"}
                ],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["company_name"] == "Company"
        assert data["stats"]["matched_transactions"] == 2
        assert data["comparison_results"][1]["document_number"] == "DD104"

    @pytest.mark.asyncio
    async def test_reconcile_empty(self, client):
        """Test empty batches are rejected."""
        response = await client.post(
            "/api/recon/reconcile",
            json={"bank_transactions": [], "ledger_transactions": []},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing bank data or GL file"

    @pytest.mark.asyncio
    async def test_reconcile_validation(self, client):
        """Test malformed request bodies are rejected by validation."""
        response = await client.post("/api/recon/reconcile", json={"bank_transactions": "nope"})

        assert response.status_code == 422


class TestRulesAPI:
    """Tests for the rules listing."""

    @pytest.mark.asyncio
    async def test_list_rules(self, client):
        """Test listing the active known-vendor rules."""
        response = await client.get("/api/recon/rules")

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 7
        assert data[0]["vendor_name"] == "Sunil Kumar Tadamatta Christopher"
        assert "1690" in data[0]["reserved_check_numbers"]
