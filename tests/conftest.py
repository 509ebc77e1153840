"""Pytest configuration and fixtures."""

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.models.recon import BankTransaction, LedgerTransaction
from app.services.matching import DEFAULT_RULES, MatchingEngine, RuleSet
from app.services.matching.rules import DEFAULT_RULE_DATA
from app.services.normalizer import RecordNormalizer


@pytest.fixture
async def client():
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def rules():
    """Built-in rule set."""
    return DEFAULT_RULES


@pytest.fixture
def rules_without_expedia():
    """Built-in rules minus the Expedia known-vendor override."""
    data = dict(DEFAULT_RULE_DATA)
    data["known_vendors"] = [
        item for item in DEFAULT_RULE_DATA["known_vendors"] if item["vendor_id"] != "EXP"
    ]
    return RuleSet.from_dict(data)


@pytest.fixture
def normalizer():
    """Record normalizer with the default placeholder marker."""
    return RecordNormalizer()


@pytest.fixture
def engine(rules):
    """Matching engine with the built-in rules and default threshold."""
    return MatchingEngine(rules=rules, threshold=5)


@pytest.fixture
def make_bank():
    """Factory for debit bank transactions."""

    def _make(description: str, amount: str, date: str = "") -> BankTransaction:
        value = Decimal(amount)
        return BankTransaction(
            date=date, description=description, total_amount=value, debit_amount=value
        )

    return _make


@pytest.fixture
def make_ledger():
    """Factory for ledger transactions."""

    def _make(description: str = "", amount: str = "0", **fields) -> LedgerTransaction:
        return LedgerTransaction(description=description, amount=Decimal(amount), **fields)

    return _make
