# ─── Standard library imports ───
from enum import IntEnum


class RecoveryAction(IntEnum):
    """
    Ordered data stall recovery ladder.

    • NONE:                  baseline, no recovery in progress
    • REESTABLISH_INTERNET:  tear down and reconnect the data network
    • RADIO_POWER_CYCLE:     power the radio off and on again
    • MODEM_REBOOT:          reboot the baseband

    Invariants:
    • Each index is strictly more disruptive than the one before it
    • NONE is both the initial and the healthy state
    """
    NONE = 0
    REESTABLISH_INTERNET = 1
    RADIO_POWER_CYCLE = 2
    MODEM_REBOOT = 3

    def __str__(self) -> str:
        return self.name

    @property
    def touches_radio(self) -> bool:
        return self >= RecoveryAction.RADIO_POWER_CYCLE

    @classmethod
    def steps(cls) -> tuple["RecoveryAction", ...]:
        """Every escalation step, least disruptive first (NONE excluded)."""
        return tuple(action for action in cls if action != cls.NONE)


RECOVERY_ACTION_EMOJI = {
    RecoveryAction.NONE:                 "💚",
    RecoveryAction.REESTABLISH_INTERNET: "🔁",
    RecoveryAction.RADIO_POWER_CYCLE:    "📡",
    RecoveryAction.MODEM_REBOOT:         "🔌",
}
