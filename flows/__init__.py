"""
Flows Package

The four user-facing task sequences of the rewards app (watch, edit, refer,
withdraw). Each flow is an independent state machine that owns its own state
and timers; flows only meet through the shared credit ledger.
"""

from .errors import FlowError, ValidationError, InvalidStateTransitionError
from .timers import SessionTimer
from .watch import WatchFlow, WatchSession, WatchState
from .edit import ImageEditFlow, EditResult, SelectedImage
from .referral import ReferralFlow, ReferralState
from .withdraw import (
    WithdrawalFlow,
    WithdrawalStage,
    WithdrawalDraft,
    WithdrawalReceipt,
    WithdrawalState,
)

__all__ = [
    "FlowError",
    "ValidationError",
    "InvalidStateTransitionError",
    "SessionTimer",
    "WatchFlow",
    "WatchSession",
    "WatchState",
    "ImageEditFlow",
    "EditResult",
    "SelectedImage",
    "ReferralFlow",
    "ReferralState",
    "WithdrawalFlow",
    "WithdrawalStage",
    "WithdrawalDraft",
    "WithdrawalReceipt",
    "WithdrawalState",
]
