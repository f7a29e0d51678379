"""Tests for the rate-limited call gate."""

from nutrimind.services.rate_gate import (
    ANALYZE_FOOD_KEY,
    SUGGESTION_KEY,
    RateLimitedCallGate,
)
from tests.conftest import FakeClock


def test_first_call_is_allowed() -> None:
    gate = RateLimitedCallGate(clock=FakeClock())

    check = gate.check_cooldown()

    assert check.can_call
    assert check.message is None


def test_call_inside_window_is_rejected_with_remaining_seconds() -> None:
    clock = FakeClock()
    gate = RateLimitedCallGate(cooldown_seconds=4.1, clock=clock)
    gate.record_call(SUGGESTION_KEY)

    clock.advance(1.0)
    check = gate.check_cooldown(SUGGESTION_KEY)

    assert not check.can_call
    assert check.message == "Please wait 3.1 more second(s)."


def test_call_after_window_is_allowed() -> None:
    clock = FakeClock()
    gate = RateLimitedCallGate(cooldown_seconds=4.1, clock=clock)
    gate.record_call()

    clock.advance(4.2)

    assert gate.check_cooldown().can_call


def test_keys_have_independent_windows() -> None:
    clock = FakeClock()
    gate = RateLimitedCallGate(clock=clock)
    gate.record_call(SUGGESTION_KEY)

    assert gate.check_cooldown(ANALYZE_FOOD_KEY).can_call
    assert not gate.check_cooldown(SUGGESTION_KEY).can_call


def test_per_key_cooldown_override() -> None:
    clock = FakeClock()
    gate = RateLimitedCallGate(
        cooldown_seconds=4.1, clock=clock, cooldowns={ANALYZE_FOOD_KEY: 10.0}
    )
    gate.record_call(ANALYZE_FOOD_KEY)
    gate.record_call(SUGGESTION_KEY)

    clock.advance(5.0)

    assert gate.check_cooldown(SUGGESTION_KEY).can_call
    assert not gate.check_cooldown(ANALYZE_FOOD_KEY).can_call


def test_reset_clears_the_window() -> None:
    gate = RateLimitedCallGate(clock=FakeClock())
    gate.record_call()

    gate.reset()

    assert gate.check_cooldown().can_call
