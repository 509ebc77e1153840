"""Vendor knowledge derived from the ledger batch and rule tables."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from app.models.recon import LedgerTransaction

from .rules import RuleSet

logger = logging.getLogger(__name__)


@dataclass
class VendorProfile:
    """Vendor seen in the ledger batch, with every GL account booked to it."""

    vendor_id: str
    vendor_name: str
    gl_accounts: set[str] = field(default_factory=set)


@dataclass
class VendorKeyInfo:
    """Vendor identity implied by a bank description."""

    vendor_id: str = ""
    vendor_name: str = ""
    gl_account: str = ""


class VendorInference:
    """Description-based vendor and GL-account inference from keyword rules."""

    def __init__(self, rules: RuleSet):
        self.rules = rules

    def key_info(self, description: str | None) -> VendorKeyInfo:
        """Vendor identity from the first keyword rule matching the description."""
        for rule in self.rules.vendor_keywords:
            if rule.matches(description):
                return VendorKeyInfo(
                    vendor_id=rule.vendor_id,
                    vendor_name=rule.vendor_name,
                    gl_account=rule.gl_account,
                )
        return VendorKeyInfo()

    def infer_vendor_id(self, description: str | None) -> str:
        """Infer a vendor id from a bank description.

        Keyword rules first; otherwise the first three letters of the first
        word, upper-cased, when that word has at least three characters.
        """
        if not description:
            return ""
        info = self.key_info(description)
        if info.vendor_id:
            return info.vendor_id

        first_word = description.split(" ")[0]
        if len(first_word) >= 3:
            return first_word[:3].upper()
        return ""

    def infer_vendor_name(self, description: str | None) -> str:
        """Keyword vendor name, falling back to the inferred vendor id."""
        info = self.key_info(description)
        return info.vendor_name or self.infer_vendor_id(description)

    def infer_gl_account(self, description: str | None) -> str:
        """Infer a GL account from keywords, defaulting to the unknown account."""
        if not description:
            return self.rules.unknown_gl_account
        for rule in self.rules.gl_accounts:
            if rule.matches(description):
                return rule.gl_account
        return self.rules.unknown_gl_account


class VendorKnowledgeBase(VendorInference):
    """Catalog of ledger vendors plus description-based inference.

    Profiles are advisory context only; nothing requires a lookup hit.
    """

    def __init__(self, rules: RuleSet):
        super().__init__(rules)
        self.profiles: dict[str, VendorProfile] = {}

    @classmethod
    def from_ledger(
        cls, ledger: Iterable[LedgerTransaction], rules: RuleSet
    ) -> "VendorKnowledgeBase":
        """Build the catalog with a single scan over the ledger batch."""
        kb = cls(rules)
        for entry in ledger:
            kb.add(entry)
        logger.info(f"Unique vendors extracted: {len(kb.profiles)}")
        return kb

    def add(self, entry: LedgerTransaction) -> None:
        """Insert or update the profile for an entry's vendor."""
        if not entry.vendor_id:
            return
        profile = self.profiles.get(entry.vendor_id)
        if profile is None:
            profile = VendorProfile(
                vendor_id=entry.vendor_id,
                vendor_name=entry.vendor_name or entry.vendor_id,
            )
            self.profiles[entry.vendor_id] = profile
        if entry.gl_account:
            profile.gl_accounts.add(entry.gl_account)

    def get(self, vendor_id: str) -> VendorProfile | None:
        return self.profiles.get(vendor_id)

    def __len__(self) -> int:
        return len(self.profiles)
