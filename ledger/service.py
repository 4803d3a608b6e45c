import logging
from decimal import Decimal
from typing import Union

from .models import EntryType, BalanceSnapshot, BalanceChange

logger = logging.getLogger(__name__)

DEFAULT_STARTING_BALANCE = Decimal("125.50")

Amount = Union[Decimal, int, float, str]


class LedgerError(Exception):
    pass


class InvalidAmountError(LedgerError):
    pass


class InsufficientFundsError(LedgerError):
    pass


def to_credits(value: Amount) -> Decimal:
    """Coerce a number into an exact Decimal credit amount."""
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value)


class CreditLedger:
    """In-memory credit balance shared by the flows of one app instance.

    The balance lives only as long as the object. Callers hold a reference to
    the same ledger instead of reaching for module-level state.
    """

    def __init__(self, starting_balance: Amount = DEFAULT_STARTING_BALANCE):
        balance = to_credits(starting_balance)
        if balance < 0:
            raise InvalidAmountError(f"Starting balance cannot be negative: {balance}")
        self._balance = balance

    @property
    def balance(self) -> Decimal:
        return self._balance

    def snapshot(self) -> BalanceSnapshot:
        return BalanceSnapshot(balance=self._balance)

    def earn(self, amount: Amount) -> Decimal:
        change = self._apply(EntryType.EARN, self._positive(amount))
        return change.balance_after

    def withdraw(self, amount: Amount) -> Decimal:
        value = self._positive(amount)
        if value > self._balance:
            raise InsufficientFundsError(
                f"Cannot withdraw {value} credits from a balance of {self._balance}"
            )
        change = self._apply(EntryType.WITHDRAW, value)
        return change.balance_after

    def _positive(self, amount: Amount) -> Decimal:
        value = to_credits(amount)
        if not value.is_finite() or value <= 0:
            raise InvalidAmountError(f"Amount must be positive, got {value}")
        return value

    def _apply(self, entry_type: EntryType, amount: Decimal) -> BalanceChange:
        before = self._balance
        after = before + amount if entry_type == EntryType.EARN else before - amount
        self._balance = after
        logger.info("Ledger %s %s credits: %s -> %s", entry_type.value, amount, before, after)
        return BalanceChange(
            entry_type=entry_type,
            amount=amount,
            balance_before=before,
            balance_after=after,
        )
