from decimal import Decimal
from enum import Enum
from pydantic import BaseModel, ConfigDict, computed_field


class EntryType(str, Enum):
    EARN = "EARN"
    WITHDRAW = "WITHDRAW"


class BalanceSnapshot(BaseModel):
    balance: Decimal
    currency: str = "credits"

    model_config = ConfigDict(json_schema_extra={
        "example": {"balance": "125.50", "currency": "credits", "display": "125.50"}
    })

    @computed_field
    @property
    def display(self) -> str:
        return f"{self.balance:.2f}"


class BalanceChange(BaseModel):
    entry_type: EntryType
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
