import logging
from typing import Callable, Optional

from pydantic import BaseModel

from .timers import SessionTimer

logger = logging.getLogger(__name__)

REFERRAL_LINK = "https://viewinsta.example/ref/user123"
REFERRAL_BONUS = 50
COPY_RESET_SECONDS = 2.0


class ReferralState(BaseModel):
    link: str
    copied: bool
    bonus: int
    message: str


class ReferralFlow:
    def __init__(
        self,
        link: str = REFERRAL_LINK,
        bonus: int = REFERRAL_BONUS,
        reset_delay: float = COPY_RESET_SECONDS,
        clipboard: Optional[Callable[[str], None]] = None,
    ):
        self.link = link
        self.bonus = bonus
        self.reset_delay = reset_delay
        self.clipboard = clipboard
        self.copied = False
        self._timer = SessionTimer("referral-copied-reset")

    def state(self) -> ReferralState:
        return ReferralState(
            link=self.link,
            copied=self.copied,
            bonus=self.bonus,
            message=f"Earn {self.bonus} credits for every friend who signs up and watches their first video.",
        )

    def copy(self) -> ReferralState:
        if self.clipboard is not None:
            self.clipboard(self.link)
        self.copied = True
        self._timer.once(self.reset_delay, self._clear)
        return self.state()

    def close(self) -> None:
        self._timer.cancel()

    def _clear(self) -> None:
        self.copied = False
