# ─── Future imports ───
from __future__ import annotations

# ─── Standard library imports ───
from enum import Enum, auto
from typing import Protocol

# ─── Project imports ───
from .logger import get_logger


logger = get_logger("guards")

# Radio signal levels run 0 (none or unknown) to 4; MODERATE is the lowest usable
SIGNAL_LEVEL_MODERATE = 2
SIGNAL_LEVEL_GOOD = 3


class CallState(Enum):
    IDLE = auto()      # no call
    RINGING = auto()   # incoming call, not yet answered
    OFFHOOK = auto()   # dialing, active or on hold

    def __str__(self) -> str:
        return self.name

    @property
    def in_call(self) -> bool:
        return self != CallState.IDLE


class SignalQualityProvider(Protocol):
    def current_level(self) -> int: ...


class CallStateProvider(Protocol):
    def current_state(self) -> CallState: ...


class GuardVerdict(Enum):
    """
    Outcome of the pre-action guard checks.

    • PASS:         safe to act
    • POOR_SIGNAL:  reset the ladder; recovery would not help
    • IN_CALL:      hold; radio actions would drop the call
    • UNAVAILABLE:  a guard could not be read; hold conservatively
    """
    PASS = auto()
    POOR_SIGNAL = auto()
    IN_CALL = auto()
    UNAVAILABLE = auto()

    def __str__(self) -> str:
        return self.name

    @property
    def holds(self) -> bool:
        return self in (GuardVerdict.IN_CALL, GuardVerdict.UNAVAILABLE)


def evaluate_guards(
    signal: SignalQualityProvider,
    calls: CallStateProvider,
    poor_signal_threshold: int,
) -> GuardVerdict:
    """
    Poll both guard collaborators synchronously.

    Signal is checked first: a poor signal resets recovery even mid-call.
    """
    try:
        level = signal.current_level()
    except Exception as e:
        logger.warning(f"Signal level unavailable ({type(e).__name__}: {e})")
        return GuardVerdict.UNAVAILABLE

    if level < poor_signal_threshold:
        logger.debug(f"Signal level {level} below threshold {poor_signal_threshold}")
        return GuardVerdict.POOR_SIGNAL

    try:
        state = calls.current_state()
    except Exception as e:
        logger.warning(f"Call state unavailable ({type(e).__name__}: {e})")
        return GuardVerdict.UNAVAILABLE

    if state.in_call:
        return GuardVerdict.IN_CALL

    return GuardVerdict.PASS
