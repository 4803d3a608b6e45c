import logging
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel

from ledger import CreditLedger, BalanceSnapshot
from flows import (
    InvalidStateTransitionError,
    WatchFlow,
    ImageEditFlow,
    ReferralFlow,
    WithdrawalFlow,
)
from .config import Settings

logger = logging.getLogger(__name__)


class Tab(str, Enum):
    WATCH = "watch"
    EDIT = "edit"
    REFER = "refer"
    WITHDRAW = "withdraw"


TAB_LABELS = {
    Tab.WATCH: "Watch Video",
    Tab.EDIT: "Edit Image",
    Tab.REFER: "Refer & Earn",
    Tab.WITHDRAW: "Withdraw",
}


class TabInfo(BaseModel):
    tab: Tab
    label: str
    active: bool


class ShellState(BaseModel):
    active_tab: Tab
    balance: BalanceSnapshot
    tabs: list[TabInfo]


class RewardsApp:
    """Tab navigator that owns the ledger and mounts one flow at a time.

    Switching tabs disposes the flow being left and mounts a fresh one for the
    new tab, so each visit starts from the flow's initial state. The ledger is
    the only state that survives navigation.
    """

    def __init__(
        self,
        settings: Settings,
        image_client,
        ledger: Optional[CreditLedger] = None,
        clipboard: Optional[Callable[[str], None]] = None,
    ):
        self.settings = settings
        self.image_client = image_client
        self.ledger = ledger or CreditLedger(settings.starting_balance)
        self.clipboard = clipboard
        self.active_tab = Tab.WATCH
        self._flow = self._mount(self.active_tab)

    @property
    def balance(self):
        return self.ledger.balance

    def state(self) -> ShellState:
        return ShellState(
            active_tab=self.active_tab,
            balance=self.ledger.snapshot(),
            tabs=[
                TabInfo(tab=tab, label=TAB_LABELS[tab], active=tab == self.active_tab)
                for tab in Tab
            ],
        )

    def select_tab(self, tab: Tab) -> ShellState:
        tab = Tab(tab)
        if tab != self.active_tab:
            logger.info("Navigating %s -> %s", self.active_tab.value, tab.value)
            self._dispose(self._flow)
            self.active_tab = tab
            self._flow = self._mount(tab)
        return self.state()

    @property
    def watch(self) -> WatchFlow:
        return self._active(Tab.WATCH)

    @property
    def edit(self) -> ImageEditFlow:
        return self._active(Tab.EDIT)

    @property
    def refer(self) -> ReferralFlow:
        return self._active(Tab.REFER)

    @property
    def withdraw(self) -> WithdrawalFlow:
        return self._active(Tab.WITHDRAW)

    def close(self) -> None:
        self._dispose(self._flow)

    def _active(self, tab: Tab):
        if self.active_tab != tab:
            raise InvalidStateTransitionError(
                f"Open the {tab.value} tab first (current tab: {self.active_tab.value})"
            )
        return self._flow

    def _mount(self, tab: Tab):
        s = self.settings
        if tab == Tab.WATCH:
            return WatchFlow(
                self.ledger,
                duration=s.video_duration,
                reward=s.video_reward,
                tick_interval=s.watch_tick_seconds,
                claim_delay=s.claim_delay_seconds,
            )
        if tab == Tab.EDIT:
            return ImageEditFlow(self.image_client)
        if tab == Tab.REFER:
            return ReferralFlow(
                link=s.referral_link,
                bonus=s.referral_bonus,
                reset_delay=s.copy_reset_seconds,
                clipboard=self.clipboard,
            )
        return WithdrawalFlow(self.ledger, fee=s.withdrawal_fee, minimum=s.withdrawal_minimum)

    @staticmethod
    def _dispose(flow) -> None:
        close = getattr(flow, "close", None)
        if close is not None:
            close()
