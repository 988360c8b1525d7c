# ─── Future imports ───
from __future__ import annotations

# ─── Standard library imports ───
from dataclasses import dataclass
from typing import Sequence

# ─── Project imports ───
from .config import Config
from .guards import SIGNAL_LEVEL_MODERATE
from .recovery_action import RecoveryAction
from .utils import parse_csv_bools, parse_csv_floats


class ConfigurationError(ValueError):
    """Recovery step table cannot drive escalation (empty, mismatched, malformed)."""


@dataclass(frozen=True)
class RecoveryPolicy:
    """
    Per-deployment policy for data stall escalation.

    Step k (1-based, matching RecoveryAction) owns `delays_s[k-1]`, the time to
    wait after dispatching it before escalating further, and `skips[k-1]`,
    which removes the step from the ladder entirely.

    Instances are immutable; a reload replaces the whole object.
    """

    delays_s: tuple[float, ...]
    skips: tuple[bool, ...]

    # ─── Guard thresholds ───

    # Signal levels strictly below this are "poor" and abort recovery
    poor_signal_threshold: int = SIGNAL_LEVEL_MODERATE

    # ─── Capability gates ───

    # Allow the radio-neutral first step while a voice call is active
    reestablish_during_call: bool = True

    # Steps that touch the radio are treated as skipped when False
    allow_radio_actions: bool = True

    def __post_init__(self) -> None:
        # Normalize lists from callers into tuples (frozen dataclass)
        object.__setattr__(self, "delays_s", tuple(float(d) for d in self.delays_s))
        object.__setattr__(self, "skips", tuple(bool(s) for s in self.skips))

        if not self.delays_s or not self.skips:
            raise ConfigurationError("recovery step table is empty")

        if len(self.delays_s) != len(self.skips):
            raise ConfigurationError(
                f"delay/skip length mismatch: "
                f"{len(self.delays_s)} delays vs {len(self.skips)} skip flags"
            )

        max_steps = len(RecoveryAction.steps())
        if len(self.delays_s) > max_steps:
            raise ConfigurationError(
                f"{len(self.delays_s)} steps configured, only {max_steps} recovery actions exist"
            )

        if any(d < 0 for d in self.delays_s):
            raise ConfigurationError(f"negative recovery delay in {self.delays_s}")

    # ─── Constructors ───

    @classmethod
    def from_arrays(
        cls,
        delays_s: Sequence[float],
        skips: Sequence[bool],
        **kwargs,
    ) -> RecoveryPolicy:
        return cls(delays_s=tuple(delays_s), skips=tuple(skips), **kwargs)

    @classmethod
    def from_env(cls) -> RecoveryPolicy:
        """
        Build the policy from Config (environment / .env).

        Raises:
            ConfigurationError: if the step arrays cannot be parsed or validated.
        """
        try:
            delays_s = parse_csv_floats(Config.RECOVERY_DELAYS_S)
            skips = parse_csv_bools(Config.RECOVERY_SKIP_STEPS)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        return cls(
            delays_s=delays_s,
            skips=skips,
            poor_signal_threshold=Config.POOR_SIGNAL_THRESHOLD,
            reestablish_during_call=Config.REESTABLISH_DURING_CALL,
            allow_radio_actions=Config.ALLOW_RADIO_RECOVERY,
        )

    # ─── Step table queries ───

    @property
    def final_step(self) -> RecoveryAction:
        """Last configured step (the ladder may be shorter than RecoveryAction)."""
        return RecoveryAction(len(self.delays_s))

    def configured_steps(self) -> tuple[RecoveryAction, ...]:
        return tuple(RecoveryAction(i) for i in range(1, self.final_step + 1))

    def is_eligible(self, action: RecoveryAction) -> bool:
        """
        True if `action` may be dispatched under this policy.
        """
        if action == RecoveryAction.NONE or action > self.final_step:
            return False
        if self.skips[action - 1]:
            return False
        if action.touches_radio and not self.allow_radio_actions:
            return False
        return True

    def delay_for(self, action: RecoveryAction) -> float:
        """
        Delay to wait after `action` before considering the next step.

        NONE (and anything past the configured ladder) uses the nearest step.
        """
        index = min(max(int(action), 1), len(self.delays_s)) - 1
        return self.delays_s[index]

    def first_step(self) -> RecoveryAction:
        """First eligible step, or NONE if every step is skipped."""
        return self.next_step(RecoveryAction.NONE)

    def next_step(self, current: RecoveryAction) -> RecoveryAction:
        """
        Next eligible step after `current`.

        Skipped steps are jumped over. When nothing eligible remains, the
        ladder is capped: `current` is returned (and re-dispatched by the
        caller if it is itself eligible).
        """
        for action in self.configured_steps():
            if action > current and self.is_eligible(action):
                return action
        return current

    # ─── Introspection / debugging helpers ───

    def summary(self) -> dict[str, object]:
        """
        Structured summary of the effective policy, for startup diagnostics.
        """
        return {
            "steps": [
                {
                    "action": str(action),
                    "delay_s": self.delay_for(action),
                    "skipped": not self.is_eligible(action),
                }
                for action in self.configured_steps()
            ],
            "poor_signal_threshold": self.poor_signal_threshold,
            "reestablish_during_call": self.reestablish_during_call,
            "allow_radio_actions": self.allow_radio_actions,
        }
