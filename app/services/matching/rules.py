"""Data-driven vendor and GL-account rule tables.

Every table is an ordered list of pattern -> outcome records. Patterns are
case-insensitive regexes searched anywhere in a bank description; the first
matching record wins. The built-in tables below can be replaced wholesale by a
JSON file with the same shape (see ``load_rules``).
"""

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from app.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KnownVendorRule:
    """Named payee with a fixed vendor identity and GL account."""

    pattern: re.Pattern
    vendor_id: str
    vendor_name: str
    gl_account: str
    reserved_check_numbers: tuple[str, ...] = ()
    check_name: str = ""

    def matches(self, text: str | None) -> bool:
        return bool(text) and self.pattern.search(text) is not None

    @property
    def display_check_name(self) -> str:
        return self.check_name or self.vendor_name

    def to_dict(self) -> dict[str, Any]:
        return {
            "pattern": self.pattern.pattern,
            "vendor_id": self.vendor_id,
            "vendor_name": self.vendor_name,
            "gl_account": self.gl_account,
            "reserved_check_numbers": list(self.reserved_check_numbers),
            "check_name": self.display_check_name,
        }


@dataclass(frozen=True)
class VendorKeywordRule:
    """Keyword pattern implying a vendor id (and sometimes name/GL account)."""

    pattern: re.Pattern
    vendor_id: str
    vendor_name: str = ""
    gl_account: str = ""

    def matches(self, text: str | None) -> bool:
        return bool(text) and self.pattern.search(text) is not None


@dataclass(frozen=True)
class VendorDisplayName:
    """Canonical display name for an inferred vendor id."""

    vendor_name: str
    gl_account: str = ""


@dataclass(frozen=True)
class GLAccountRule:
    """Keyword pattern implying a GL account."""

    pattern: re.Pattern
    gl_account: str

    def matches(self, text: str | None) -> bool:
        return bool(text) and self.pattern.search(text) is not None


@dataclass(frozen=True)
class RuleSet:
    """Complete set of rule tables used by matching and output generation."""

    known_vendors: tuple[KnownVendorRule, ...] = ()
    special_vendors: tuple[KnownVendorRule, ...] = ()
    vendor_keywords: tuple[VendorKeywordRule, ...] = ()
    vendor_display_names: Mapping[str, VendorDisplayName] = field(default_factory=dict)
    gl_accounts: tuple[GLAccountRule, ...] = ()
    check_payee_pattern: re.Pattern | None = None
    check_paid_pattern: re.Pattern | None = None
    unknown_gl_account: str = "99999"

    def find_known_vendor(self, text: str | None) -> KnownVendorRule | None:
        """First known-vendor rule matching the text, in declaration order."""
        for rule in self.known_vendors:
            if rule.matches(text):
                return rule
        return None

    def find_special_vendor(self, text: str | None) -> KnownVendorRule | None:
        """First output override rule matching the text."""
        for rule in self.special_vendors:
            if rule.matches(text):
                return rule
        return None

    def is_check_payee(self, text: str | None) -> bool:
        """Check if the description names a payee normally paid by check."""
        if not text or self.check_payee_pattern is None:
            return False
        return self.check_payee_pattern.search(text) is not None

    def is_check_paid(self, text: str | None) -> bool:
        """Check if the description itself says it was paid by check."""
        if not text or self.check_paid_pattern is None:
            return False
        return self.check_paid_pattern.search(text) is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RuleSet":
        """Build a rule set from plain data (patterns as strings)."""

        def compile_pattern(value: str | None) -> re.Pattern | None:
            if not value:
                return None
            return re.compile(value, re.IGNORECASE)

        def vendor_rule(item: Mapping[str, Any]) -> KnownVendorRule:
            return KnownVendorRule(
                pattern=re.compile(item["pattern"], re.IGNORECASE),
                vendor_id=item.get("vendor_id", ""),
                vendor_name=item["vendor_name"],
                gl_account=item.get("gl_account", ""),
                reserved_check_numbers=tuple(
                    str(n) for n in item.get("reserved_check_numbers", [])
                ),
                check_name=item.get("check_name", ""),
            )

        return cls(
            known_vendors=tuple(vendor_rule(item) for item in data.get("known_vendors", [])),
            special_vendors=tuple(vendor_rule(item) for item in data.get("special_vendors", [])),
            vendor_keywords=tuple(
                VendorKeywordRule(
                    pattern=re.compile(item["pattern"], re.IGNORECASE),
                    vendor_id=item["vendor_id"],
                    vendor_name=item.get("vendor_name", ""),
                    gl_account=item.get("gl_account", ""),
                )
                for item in data.get("vendor_keywords", [])
            ),
            vendor_display_names={
                vendor_id: VendorDisplayName(
                    vendor_name=item["vendor_name"],
                    gl_account=item.get("gl_account", ""),
                )
                for vendor_id, item in data.get("vendor_display_names", {}).items()
            },
            gl_accounts=tuple(
                GLAccountRule(
                    pattern=re.compile(item["pattern"], re.IGNORECASE),
                    gl_account=item["gl_account"],
                )
                for item in data.get("gl_accounts", [])
            ),
            check_payee_pattern=compile_pattern(data.get("check_payee_pattern")),
            check_paid_pattern=compile_pattern(data.get("check_paid_pattern")),
            unknown_gl_account=data.get("unknown_gl_account", settings.unknown_gl_account),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "RuleSet":
        """Load a rule set from a JSON file."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)


# Travel booking merchants, shared by keyword and GL tables
_BOOKING = r"booking|boo(?:king)?(?:\.|com|\s)"
_EXPEDIA = r"expedia|exp(?:edia)?(?:\s|,|\.|\*|inc)"
_BANK_CHARGE = r"^(?=.*bank)(?=.*(?:charge|fee|disc))"

DEFAULT_RULE_DATA: dict[str, Any] = {
    "known_vendors": [
        {
            "pattern": r"sunil\s+kumar\s+tadamatta\s+christop(h)?er",
            "vendor_id": "",
            "vendor_name": "Sunil Kumar Tadamatta Christopher",
            "gl_account": "62500",
            "reserved_check_numbers": [
                "1339", "1689", "1690", "1692", "1695", "1697", "1701", "1704", "1705",
            ],
        },
        {
            "pattern": r"maria\s+torres",
            "vendor_id": "",
            "vendor_name": "Maria Torres",
            "gl_account": "62500",
            "reserved_check_numbers": ["1693", "1696", "1700", "1702", "1706"],
        },
        {
            "pattern": r"sunil\s+tch",
            "vendor_id": "",
            "vendor_name": "Sunil TCH",
            "gl_account": "62000",
            "reserved_check_numbers": ["1340"],
        },
        {
            "pattern": r"city\s+of\s+barnwell",
            "vendor_id": "CIT",
            "vendor_name": "CITY OF BARNWELL ACC TAX",
            "gl_account": "75000",
            "reserved_check_numbers": ["1694", "1703"],
        },
        {
            "pattern": r"loan\s+\$?490",
            "vendor_id": "LOA 5358",
            "vendor_name": "LOAN $490",
            "gl_account": "29000",
        },
        {
            "pattern": r"booking(?:\.com)?",
            "vendor_id": "BOO",
            "vendor_name": "BOOKING.COM",
            "gl_account": "62520",
        },
        {
            "pattern": r"exp(?:edia)?(?:\s|,|\.|\*|inc)",
            "vendor_id": "EXP",
            "vendor_name": "EXPEDIA INC.",
            "gl_account": "62520",
        },
    ],
    "special_vendors": [
        {
            "pattern": r"sunil\s+kumar\s+tadamatta\s+christop(h)?er",
            "vendor_id": "",
            "vendor_name": "Sunil Kumar Tadamatta Christopher",
            "gl_account": "62500",
        },
        {
            "pattern": r"maria\s+torres",
            "vendor_id": "",
            "vendor_name": "Maria Torres",
            "gl_account": "62500",
        },
        {
            "pattern": r"sunil\s+tch",
            "vendor_id": "",
            "vendor_name": "Sunil TCH",
            "gl_account": "62000",
        },
        {
            "pattern": r"city\s+of\s+barnwell",
            "vendor_id": "CIT",
            "vendor_name": "CITY OF BARNWELL ACC TAX",
            "gl_account": "75000",
        },
    ],
    "vendor_keywords": [
        {"pattern": r"american express|amex", "vendor_id": "AME", "vendor_name": "AMERICAN EXPRESS"},
        {
            "pattern": _EXPEDIA,
            "vendor_id": "EXP",
            "vendor_name": "EXPEDIA INC.",
            "gl_account": "62520",
        },
        {"pattern": _BANK_CHARGE, "vendor_id": "BAN", "vendor_name": "BANK CHARGES"},
        {"pattern": r"dominion", "vendor_id": "DOM", "vendor_name": "DOMINION ENERGY"},
        {
            "pattern": _BOOKING,
            "vendor_id": "BOO",
            "vendor_name": "BOOKING.COM",
            "gl_account": "62520",
        },
        {"pattern": r"irs|^(?=.*tax)(?=.*payment)", "vendor_id": "IRS", "vendor_name": "IRS USA TAX"},
        {"pattern": r"loan", "vendor_id": "LOA", "vendor_name": "LOAN"},
        {"pattern": r"sc dep|sc dor", "vendor_id": "SC DOR", "vendor_name": "SC DOR WITHHOLDING"},
        {"pattern": r"new york life|ny life", "vendor_id": "NEW", "vendor_name": "NEW YORK LIFE"},
        {"pattern": r"sba loan", "vendor_id": "SBA", "vendor_name": "SBA LOAN PAYMENT"},
        {"pattern": r"grow financial", "vendor_id": "GRO", "vendor_name": "GROW FINANCIAL"},
        # Id-only fallbacks
        {"pattern": r"payroll", "vendor_id": "PAY"},
        {"pattern": r"city of barnwell", "vendor_id": "CIT"},
        {"pattern": r"mcgregor", "vendor_id": "McG"},
    ],
    "vendor_display_names": {
        "LOA": {"vendor_name": "LOAN $490"},
        "BAN": {"vendor_name": "BANK CHARGES"},
        "GRO": {"vendor_name": "GROW FINANCIAL GROW OLB"},
        "DOM": {"vendor_name": "DOMINION ENERGY"},
        "AME": {"vendor_name": "AMERICAN EXPRESS"},
        "IRS": {"vendor_name": "IRS USA TAX"},
        "SC DOR": {"vendor_name": "SC DOR WITHHOLDING"},
        "BOO": {"vendor_name": "BOOKING.COM", "gl_account": "62520"},
        "EXP": {"vendor_name": "EXPEDIA INC.", "gl_account": "62520"},
        "NEW": {"vendor_name": "NEW YORK LIFE"},
        "SBA": {"vendor_name": "SBA LOAN PAYMENT"},
    },
    "gl_accounts": [
        {"pattern": r"loan payment|loan # ", "gl_account": "29000"},
        {"pattern": _BANK_CHARGE, "gl_account": "62250"},
        {
            "pattern": (
                r"payroll|salary|"
                r"\b(?:maria|torres|sunil|kumar|christoper|shakenna|emily|staricia|nakia|aleyah)\b"
            ),
            "gl_account": "62500",
        },
        {"pattern": r"usataxpymt|sc dept revenue|tax", "gl_account": "75400"},
        {"pattern": r"dominion energy|energy|power", "gl_account": "68300"},
        {"pattern": rf"{_BOOKING}|{_EXPEDIA}|hotel|travel|flight", "gl_account": "62520"},
        {"pattern": r"insurance|premium|insura", "gl_account": "61300"},
        {"pattern": r"life", "gl_account": "61350"},
        {"pattern": r"maintenance|repair", "gl_account": "62000"},
        {"pattern": r"property|land|treasurer", "gl_account": "75500"},
        {"pattern": r"city|acc tax|barnwell", "gl_account": "75000"},
        {"pattern": r"accounting|mcgregor", "gl_account": "61500"},
        {"pattern": r"sba loan", "gl_account": "20025"},
        {"pattern": r"amex|american express", "gl_account": "20005"},
        {"pattern": r"online transfer", "gl_account": "39003-2"},
        {"pattern": r"bank", "gl_account": "10900"},
        {"pattern": r"rent", "gl_account": "67000"},
    ],
    "check_payee_pattern": r"sunil|maria|city|tadamatta|torres|christop(h)?er|tch",
    "check_paid_pattern": r"check|cheque|chk",
    "unknown_gl_account": "99999",
}

DEFAULT_RULES = RuleSet.from_dict(DEFAULT_RULE_DATA)


def load_rules(path: str | None = None) -> RuleSet:
    """Load the active rule set.

    Args:
        path: JSON rule file; defaults to the ``RULES_FILE`` setting

    Returns:
        Rules from the file when one is configured, else the built-in tables
    """
    path = path if path is not None else settings.rules_file
    if not path:
        return DEFAULT_RULES
    rules = RuleSet.from_file(path)
    logger.info(
        f"Loaded rule set from {path}: {len(rules.known_vendors)} known vendors, "
        f"{len(rules.gl_accounts)} GL rules"
    )
    return rules
