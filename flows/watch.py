import asyncio
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID, uuid4

from pydantic import BaseModel

from ledger import CreditLedger, to_credits
from .errors import ValidationError
from .timers import SessionTimer

logger = logging.getLogger(__name__)

VIDEO_DURATION = 15
CREDITS_PER_VIDEO = 10
TICK_SECONDS = 1.0
CLAIM_DELAY_SECONDS = 1.5


@dataclass
class WatchSession:
    duration: int
    duration_remaining: int
    watched: bool = False
    claiming: bool = False
    session_id: UUID = field(default_factory=uuid4)

    @property
    def progress(self) -> float:
        if self.duration <= 0:
            return 100.0
        return (self.duration - self.duration_remaining) / self.duration * 100


class WatchState(BaseModel):
    session_id: UUID
    duration: int
    duration_remaining: int
    watched: bool
    claiming: bool
    can_claim: bool
    progress: float
    reward: Decimal


class WatchFlow:
    """Countdown that gates a one-off reward claim.

    Counting -> Watched -> Claiming -> Counting (fresh session).
    """

    def __init__(
        self,
        ledger: CreditLedger,
        duration: int = VIDEO_DURATION,
        reward=CREDITS_PER_VIDEO,
        tick_interval: float = TICK_SECONDS,
        claim_delay: float = CLAIM_DELAY_SECONDS,
        autostart: bool = True,
    ):
        self.ledger = ledger
        self.duration = duration
        self.reward = to_credits(reward)
        self.tick_interval = tick_interval
        self.claim_delay = claim_delay
        self._timer = SessionTimer("watch-countdown")
        self._closed = False
        self.session = self._new_session()
        if autostart:
            self.start()

    @property
    def can_claim(self) -> bool:
        return self.session.watched and not self.session.claiming

    def state(self) -> WatchState:
        s = self.session
        return WatchState(
            session_id=s.session_id,
            duration=s.duration,
            duration_remaining=s.duration_remaining,
            watched=s.watched,
            claiming=s.claiming,
            can_claim=self.can_claim,
            progress=s.progress,
            reward=self.reward,
        )

    def start(self) -> None:
        session = self.session
        if session.duration_remaining <= 0:
            session.watched = True
            return
        self._timer.every(self.tick_interval, lambda: self._tick(session))

    def tick(self) -> bool:
        """Advance the current session by one second. Returns True while counting."""
        return self._tick(self.session)

    async def claim(self) -> Decimal:
        session = self.session
        if session.claiming:
            raise ValidationError("A claim is already in progress.", code="claim_in_progress")
        if not session.watched:
            raise ValidationError(
                f"Keep watching for {session.duration_remaining} more seconds to claim.",
                code="not_watched",
            )

        session.claiming = True
        try:
            await asyncio.sleep(self.claim_delay)
            balance = self.ledger.earn(self.reward)
        finally:
            session.claiming = False
        logger.info("Claimed %s credits for watch session %s", self.reward, session.session_id)

        if session is self.session and not self._closed:
            self._timer.cancel()
            self.session = self._new_session()
            self.start()
        return balance

    def close(self) -> None:
        self._closed = True
        self._timer.cancel()

    def _new_session(self) -> WatchSession:
        return WatchSession(duration=self.duration, duration_remaining=self.duration)

    def _tick(self, session: WatchSession) -> bool:
        if session is not self.session:
            logger.debug("Ignoring tick from stale watch session %s", session.session_id)
            return False
        if session.duration_remaining > 0:
            session.duration_remaining -= 1
        if session.duration_remaining == 0:
            session.watched = True
            return False
        return True
