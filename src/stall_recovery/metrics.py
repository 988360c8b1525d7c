# ─── Future imports ───
from __future__ import annotations

# ─── Standard library imports ───
from dataclasses import dataclass, field
from enum import Enum, auto

# ─── Project imports ───
from .guards import GuardVerdict
from .logger import get_logger
from .recovery_action import RECOVERY_ACTION_EMOJI, RecoveryAction
from .telemetry import tlog


class ResetReason(Enum):
    RECOVERED = auto()     # validation passed again
    POOR_SIGNAL = auto()   # weak signal guard
    RELOAD = auto()        # policy replaced
    TEARDOWN = auto()      # controller closed

    def __str__(self) -> str:
        return self.name


@dataclass
class StallEpisode:
    """
    One data stall, from the first not-valid report to its resolution.
    """
    started_at: float
    actions: list[RecoveryAction] = field(default_factory=list)
    ended_at: float | None = None
    reason: ResetReason | None = None

    @property
    def duration_s(self) -> float | None:
        if self.ended_at is None:
            return None
        return self.ended_at - self.started_at

    @property
    def self_recovered(self) -> bool:
        """Validation came back before any action was dispatched."""
        return self.reason == ResetReason.RECOVERED and not self.actions

    def close(self, now: float, reason: ResetReason) -> None:
        self.ended_at = now
        self.reason = reason


class RecoveryMetrics:
    """
    Metrics collaborator interface. The default implementation records nothing.

    The controller shields itself from failures raised here.
    """

    def on_escalation(self, action: RecoveryAction, episode: StallEpisode) -> None:
        pass

    def on_hold(self, action: RecoveryAction, verdict: GuardVerdict) -> None:
        pass

    def on_reset(self, previous: RecoveryAction, episode: StallEpisode | None) -> None:
        pass


class LoggingRecoveryMetrics(RecoveryMetrics):
    """
    Emit operator-grade tlog lines for every escalation, hold and reset.
    """

    def __init__(self):
        self.logger = get_logger("metrics")
        self.escalations = 0
        self.episodes = 0

    def on_escalation(self, action: RecoveryAction, episode: StallEpisode) -> None:
        self.escalations += 1
        tlog(
            self.logger,
            RECOVERY_ACTION_EMOJI[action],
            "METRICS",
            "ESCALATION",
            primary=str(action),
            meta=f"step={int(action)} | attempts={len(episode.actions)}",
        )

    def on_hold(self, action: RecoveryAction, verdict: GuardVerdict) -> None:
        tlog(
            self.logger,
            "🟡",
            "METRICS",
            "HOLD",
            primary=str(verdict),
            meta=f"action={action}",
        )

    def on_reset(self, previous: RecoveryAction, episode: StallEpisode | None) -> None:
        if episode is None:
            return

        self.episodes += 1
        duration = episode.duration_s or 0.0
        outcome = "SELF_RECOVERED" if episode.self_recovered else str(episode.reason)
        tlog(
            self.logger,
            "💚" if episode.reason == ResetReason.RECOVERED else "🟠",
            "METRICS",
            "EPISODE",
            primary=outcome,
            meta=(
                f"duration={duration:.1f}s | last_action={previous} | "
                f"actions={[str(a) for a in episode.actions]}"
            ),
        )
