"""Client-side cooldown gate for calls to the suggestion and analysis backend."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field

SUGGESTION_KEY = "suggestion"
ANALYZE_FOOD_KEY = "analyze_food"
ANALYZE_EXERCISE_KEY = "analyze_exercise"
DEFAULT_COOLDOWN_SECONDS = 4.1


@dataclass(frozen=True)
class CooldownCheck:
    """Result of a cooldown check."""

    can_call: bool
    message: str | None = None


@dataclass
class RateLimitedCallGate:
    """Tracks the last call per key and rejects calls inside the cooldown window.

    The gate is advisory: it only stops this process from issuing calls and
    never cancels calls that are already in flight. Each call site passes
    its own key, so suggestion and analysis calls are throttled separately.
    """

    cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS
    clock: Callable[[], float] = time.monotonic
    cooldowns: dict[str, float] = field(default_factory=dict)
    _last_calls: dict[str, float] = field(default_factory=dict, repr=False)

    def check_cooldown(self, key: str = SUGGESTION_KEY) -> CooldownCheck:
        """Return whether a call for ``key`` may be issued now."""
        last_call = self._last_calls.get(key)
        if last_call is None:
            return CooldownCheck(can_call=True)
        cooldown = self.cooldowns.get(key, self.cooldown_seconds)
        elapsed = self.clock() - last_call
        if elapsed < cooldown:
            remaining = cooldown - elapsed
            return CooldownCheck(
                can_call=False,
                message=f"Please wait {remaining:.1f} more second(s).",
            )
        return CooldownCheck(can_call=True)

    def record_call(self, key: str = SUGGESTION_KEY) -> None:
        """Stamp ``key`` with the current time; call right before dispatching."""
        self._last_calls[key] = self.clock()

    def reset(self, key: str = SUGGESTION_KEY) -> None:
        """Clear the cooldown for ``key``, e.g. after a failed call."""
        self._last_calls.pop(key, None)
