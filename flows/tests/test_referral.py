"""
Unit Tests for the Referral Flow and Session Timers
"""

import asyncio

import pytest

from flows.referral import ReferralFlow, REFERRAL_LINK
from flows.timers import SessionTimer


class TestReferralFlow:
    """Tests for the copy-link flow."""

    def test_initial_state(self):
        """Test the static link and bonus message."""
        flow = ReferralFlow()

        state = flow.state()

        assert state.link == REFERRAL_LINK
        assert state.copied is False
        assert "50 credits" in state.message

    async def test_copy_sets_flag_and_uses_clipboard(self):
        """Test that copy hands the link to the clipboard."""
        copied = []
        flow = ReferralFlow(clipboard=copied.append, reset_delay=10)

        try:
            state = flow.copy()

            assert state.copied is True
            assert copied == [REFERRAL_LINK]
        finally:
            flow.close()

    async def test_flag_resets_after_delay(self):
        """Test that the copied flag clears itself."""
        flow = ReferralFlow(reset_delay=0.02)

        flow.copy()
        assert flow.copied is True

        await asyncio.sleep(0.1)
        assert flow.copied is False

    async def test_second_copy_restarts_delay(self):
        """Test that copying again replaces the pending reset."""
        flow = ReferralFlow(reset_delay=0.3)

        flow.copy()
        await asyncio.sleep(0.15)
        flow.copy()
        await asyncio.sleep(0.2)

        # The first timer would have fired by now
        assert flow.copied is True

        await asyncio.sleep(0.3)
        assert flow.copied is False

    async def test_close_cancels_reset(self):
        """Test that a closed flow keeps no pending timer."""
        flow = ReferralFlow(reset_delay=0.02)
        flow.copy()

        flow.close()
        await asyncio.sleep(0.05)

        assert flow.copied is True


class TestSessionTimer:
    """Tests for the cancellable timer."""

    async def test_once_fires(self):
        """Test a one-shot callback."""
        fired = []
        timer = SessionTimer("test")

        timer.once(0.01, lambda: fired.append(True))
        await asyncio.sleep(0.05)

        assert fired == [True]
        assert timer.active is False

    async def test_every_stops_when_callback_returns_false(self):
        """Test that a repeating timer stops on a falsy callback result."""
        calls = []
        timer = SessionTimer("test")

        def callback():
            calls.append(1)
            return len(calls) < 3

        timer.every(0.005, callback)
        await asyncio.sleep(0.1)

        assert len(calls) == 3
        assert timer.active is False

    async def test_schedule_replaces_pending(self):
        """Test that scheduling again cancels the previous callback."""
        fired = []
        timer = SessionTimer("test")

        timer.once(0.01, lambda: fired.append("old"))
        timer.once(0.02, lambda: fired.append("new"))
        await asyncio.sleep(0.06)

        assert fired == ["new"]

    async def test_cancel(self):
        """Test that a cancelled timer never fires."""
        fired = []
        timer = SessionTimer("test")

        timer.once(0.01, lambda: fired.append(True))
        timer.cancel()
        await asyncio.sleep(0.03)

        assert fired == []
        assert timer.active is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
