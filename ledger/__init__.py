"""
In-memory Credit Ledger

This module provides:
- A single decimal balance seeded at startup
- earn / withdraw operations, the only ways the balance changes
- A guard that refuses to drive the balance below zero
"""

from .models import (
    EntryType,
    BalanceSnapshot,
    BalanceChange,
)
from .service import (
    CreditLedger,
    LedgerError,
    InvalidAmountError,
    InsufficientFundsError,
    to_credits,
)

__all__ = [
    "EntryType",
    "BalanceSnapshot",
    "BalanceChange",
    "CreditLedger",
    "LedgerError",
    "InvalidAmountError",
    "InsufficientFundsError",
    "to_credits",
]
