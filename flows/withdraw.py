import logging
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from ledger import CreditLedger, to_credits
from .errors import ValidationError, InvalidStateTransitionError

logger = logging.getLogger(__name__)

PROCESSING_FEE = Decimal("2.50")
MINIMUM_WITHDRAWAL = Decimal("100")

INVALID_AMOUNT = "Please enter a valid amount."
EXCEEDS_BALANCE = "Withdrawal amount plus fee cannot exceed your balance."


class WithdrawalStage(str, Enum):
    FORM = "form"
    CONFIRM = "confirm"
    SUCCESS = "success"


class WithdrawalDraft(BaseModel):
    amount: Decimal
    fee: Decimal
    total: Decimal


class WithdrawalReceipt(BaseModel):
    amount: Decimal
    fee: Decimal
    total: Decimal
    balance_after: Decimal


class WithdrawalState(BaseModel):
    stage: WithdrawalStage
    amount_text: str
    error: Optional[str] = None
    draft: Optional[WithdrawalDraft] = None
    receipt: Optional[WithdrawalReceipt] = None
    fee: Decimal
    minimum: Decimal


def parse_amount(text: str) -> Optional[Decimal]:
    """Parse a strictly positive, finite decimal amount; None when it is not one."""
    try:
        value = Decimal(text.strip())
    except (InvalidOperation, AttributeError):
        return None
    if not value.is_finite() or value <= 0:
        return None
    return value


class WithdrawalFlow:
    """form -> confirm -> success wizard.

    The amount typed into the form survives a cancel from the confirm step and
    is cleared only once a withdrawal completes.
    """

    def __init__(
        self,
        ledger: CreditLedger,
        fee=PROCESSING_FEE,
        minimum=MINIMUM_WITHDRAWAL,
    ):
        self.ledger = ledger
        self.fee = to_credits(fee)
        self.minimum = to_credits(minimum)
        self.stage = WithdrawalStage.FORM
        self.amount_text = ""
        self.error: Optional[str] = None
        self.draft: Optional[WithdrawalDraft] = None
        self.receipt: Optional[WithdrawalReceipt] = None

    def state(self) -> WithdrawalState:
        return WithdrawalState(
            stage=self.stage,
            amount_text=self.amount_text,
            error=self.error,
            draft=self.draft,
            receipt=self.receipt,
            fee=self.fee,
            minimum=self.minimum,
        )

    def submit(self, amount_text: str) -> WithdrawalDraft:
        self._require(WithdrawalStage.FORM, "submit")
        self.amount_text = amount_text
        self.error = None

        amount = parse_amount(amount_text)
        if amount is None:
            self._reject(INVALID_AMOUNT, "invalid_amount")
        # amount + fee can overflow the decimal context
        if amount > self.ledger.balance - self.fee:
            self._reject(EXCEEDS_BALANCE, "exceeds_balance")
        if amount < self.minimum:
            self._reject(f"Minimum withdrawal amount is {self.minimum.normalize():f} credits.", "below_minimum")

        self.draft = WithdrawalDraft(amount=amount, fee=self.fee, total=amount + self.fee)
        self.stage = WithdrawalStage.CONFIRM
        return self.draft

    def confirm(self) -> WithdrawalReceipt:
        self._require(WithdrawalStage.CONFIRM, "confirm")
        draft = self.draft
        balance = self.ledger.withdraw(draft.total)
        logger.info("Withdrawal of %s credits (fee %s) processed", draft.amount, draft.fee)
        self.receipt = WithdrawalReceipt(
            amount=draft.amount,
            fee=draft.fee,
            total=draft.total,
            balance_after=balance,
        )
        self.stage = WithdrawalStage.SUCCESS
        self.amount_text = ""
        self.draft = None
        return self.receipt

    def cancel(self) -> WithdrawalState:
        self._require(WithdrawalStage.CONFIRM, "cancel")
        self.stage = WithdrawalStage.FORM
        self.draft = None
        return self.state()

    def acknowledge(self) -> WithdrawalState:
        self._require(WithdrawalStage.SUCCESS, "acknowledge")
        self.stage = WithdrawalStage.FORM
        self.amount_text = ""
        self.receipt = None
        return self.state()

    def _require(self, stage: WithdrawalStage, action: str) -> None:
        if self.stage != stage:
            raise InvalidStateTransitionError(
                f"Cannot {action} a withdrawal in {self.stage.value} stage"
            )

    def _reject(self, message: str, code: str) -> None:
        self.error = message
        logger.info("Withdrawal rejected (%s): %r", code, self.amount_text)
        raise ValidationError(message, code=code)
