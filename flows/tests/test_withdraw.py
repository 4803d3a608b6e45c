"""
Unit Tests for the Withdrawal Flow

Tests cover:
1. Validation order and messages
2. Confirm debits amount plus fee
3. Cancel / acknowledge transitions
4. Invalid stage transitions
"""

import pytest
from decimal import Decimal

from ledger import CreditLedger
from flows.errors import ValidationError, InvalidStateTransitionError
from flows.withdraw import WithdrawalFlow, WithdrawalStage, parse_amount


def make_flow(balance="125.50"):
    ledger = CreditLedger(Decimal(balance))
    return ledger, WithdrawalFlow(ledger)


class TestSubmitValidation:
    """Tests for form submission checks."""

    @pytest.mark.parametrize("text", ["", "   ", "abc", "0", "-5", "NaN", "Infinity", "1e9999x"])
    def test_invalid_amount(self, text):
        """Test that non-numeric and non-positive input is rejected first."""
        ledger, flow = make_flow()

        with pytest.raises(ValidationError) as exc_info:
            flow.submit(text)

        assert exc_info.value.code == "invalid_amount"
        assert exc_info.value.message == "Please enter a valid amount."
        assert flow.error == "Please enter a valid amount."
        assert flow.stage == WithdrawalStage.FORM
        assert ledger.balance == Decimal("125.50")

    def test_exceeds_balance(self):
        """Test that amount plus fee must fit in the balance."""
        ledger, flow = make_flow()

        with pytest.raises(ValidationError) as exc_info:
            flow.submit("123.01")

        assert exc_info.value.code == "exceeds_balance"
        assert "cannot exceed your balance" in exc_info.value.message
        assert ledger.balance == Decimal("125.50")

    @pytest.mark.parametrize("text", ["1e1000000", "9" * 40])
    def test_huge_amount_exceeds_balance(self, text):
        """Test that amounts beyond the decimal context report the balance error."""
        ledger, flow = make_flow()

        with pytest.raises(ValidationError) as exc_info:
            flow.submit(text)

        assert exc_info.value.code == "exceeds_balance"
        assert flow.stage == WithdrawalStage.FORM
        assert ledger.balance == Decimal("125.50")

    def test_exactly_balance_with_fee_passes(self):
        """Test the boundary where amount + fee equals the balance."""
        ledger, flow = make_flow()

        draft = flow.submit("123.00")

        assert draft.total == Decimal("125.50")
        assert flow.stage == WithdrawalStage.CONFIRM

    def test_below_minimum(self):
        """Test that amounts under 100 are rejected."""
        ledger, flow = make_flow()

        with pytest.raises(ValidationError) as exc_info:
            flow.submit("99.99")

        assert exc_info.value.code == "below_minimum"
        assert exc_info.value.message == "Minimum withdrawal amount is 100 credits."
        assert ledger.balance == Decimal("125.50")

    def test_balance_check_precedes_minimum(self):
        """Test that a small amount on a tiny balance reports the balance error."""
        ledger, flow = make_flow("5.00")

        with pytest.raises(ValidationError) as exc_info:
            flow.submit("50")

        assert exc_info.value.code == "exceeds_balance"

    def test_error_cleared_on_next_submit(self):
        """Test that a successful submit clears the previous error."""
        ledger, flow = make_flow()

        with pytest.raises(ValidationError):
            flow.submit("abc")
        flow.submit("100")

        assert flow.error is None

    def test_parse_amount(self):
        """Test strict decimal parsing."""
        assert parse_amount(" 100.5 ") == Decimal("100.5")
        assert parse_amount("1e2") == Decimal("100")
        assert parse_amount("12abc") is None
        assert parse_amount("0") is None


class TestConfirmFlow:
    """Tests for confirming a withdrawal."""

    def test_confirm_debits_amount_plus_fee(self):
        """Test that confirm deducts exactly amount + 2.50."""
        ledger, flow = make_flow("135.50")

        draft = flow.submit("100")
        assert draft.amount == Decimal("100")
        assert draft.fee == Decimal("2.50")
        assert draft.total == Decimal("102.50")

        receipt = flow.confirm()

        assert receipt.total == Decimal("102.50")
        assert receipt.balance_after == Decimal("33.00")
        assert ledger.balance == Decimal("33.00")
        assert flow.stage == WithdrawalStage.SUCCESS
        assert flow.amount_text == ""

    def test_submit_does_not_touch_ledger(self):
        """Test that only confirm moves money."""
        ledger, flow = make_flow()

        flow.submit("100")

        assert ledger.balance == Decimal("125.50")

    def test_acknowledge_returns_to_empty_form(self):
        """Test that acknowledging success resets the form."""
        ledger, flow = make_flow()
        flow.submit("100")
        flow.confirm()

        state = flow.acknowledge()

        assert state.stage == WithdrawalStage.FORM
        assert state.amount_text == ""
        assert state.receipt is None

    def test_cancel_keeps_amount(self):
        """Test that cancelling from confirm keeps the typed amount."""
        ledger, flow = make_flow()
        flow.submit("110")

        state = flow.cancel()

        assert state.stage == WithdrawalStage.FORM
        assert state.amount_text == "110"
        assert state.draft is None
        assert ledger.balance == Decimal("125.50")


class TestStageTransitions:
    """Tests for operations invoked from the wrong stage."""

    def test_confirm_from_form_fails(self):
        """Test that confirm requires a submitted draft."""
        ledger, flow = make_flow()

        with pytest.raises(InvalidStateTransitionError):
            flow.confirm()

    def test_cannot_confirm_twice(self):
        """Test that a draft is debited at most once."""
        ledger, flow = make_flow("300")
        flow.submit("100")
        flow.confirm()

        with pytest.raises(InvalidStateTransitionError):
            flow.confirm()

        assert ledger.balance == Decimal("197.50")

    def test_submit_from_confirm_fails(self):
        """Test that the form is not accepted while confirming."""
        ledger, flow = make_flow()
        flow.submit("100")

        with pytest.raises(InvalidStateTransitionError):
            flow.submit("101")

    def test_acknowledge_from_form_fails(self):
        """Test that acknowledge requires success."""
        ledger, flow = make_flow()

        with pytest.raises(InvalidStateTransitionError):
            flow.acknowledge()

    def test_cancel_from_success_fails(self):
        """Test that a processed withdrawal cannot be cancelled."""
        ledger, flow = make_flow()
        flow.submit("100")
        flow.confirm()

        with pytest.raises(InvalidStateTransitionError):
            flow.cancel()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
