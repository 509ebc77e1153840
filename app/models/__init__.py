"""Reconciliation records."""

from .recon import BankTransaction, LedgerTransaction

__all__ = ["BankTransaction", "LedgerTransaction"]
