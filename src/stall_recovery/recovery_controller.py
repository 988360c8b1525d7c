# ─── Future imports ───
from __future__ import annotations

# ─── Standard library imports ───
from typing import Callable

# ─── Project imports ───
from .connectivity_monitor import ConnectivityMonitor
from .guards import (
    CallStateProvider,
    GuardVerdict,
    SignalQualityProvider,
    evaluate_guards,
)
from .logger import get_logger
from .looper import Looper, Message
from .metrics import RecoveryMetrics, ResetReason, StallEpisode
from .recovery_action import RECOVERY_ACTION_EMOJI, RecoveryAction
from .recovery_policy import ConfigurationError, RecoveryPolicy
from .telemetry import tlog


class RecoveryCallback:
    """
    Executes the recovery actions chosen by the controller.

    Action methods may return False (or raise) to report that the request
    could not be carried out. Anything else counts as issued.
    """

    def on_data_stall_reestablish_internet(self) -> bool | None:
        raise NotImplementedError

    def on_radio_power_cycle(self) -> bool | None:
        raise NotImplementedError

    def on_modem_reboot(self) -> bool | None:
        raise NotImplementedError

    def on_recovery_failure(self, action: RecoveryAction, reason: str) -> None:
        """Failures the controller cannot resolve on its own (dispatch, config)."""


# Action index → RecoveryCallback method
ACTION_CALLBACKS = {
    RecoveryAction.REESTABLISH_INTERNET: "on_data_stall_reestablish_internet",
    RecoveryAction.RADIO_POWER_CYCLE: "on_radio_power_cycle",
    RecoveryAction.MODEM_REBOOT: "on_modem_reboot",
}


class RecoveryController:
    """
    Data stall recovery orchestrator.

    Responsibilities:
    • Track internet validation of the active data network
    • Escalate through the RecoveryAction ladder, one step per elapsed delay
    • Gate every step on signal quality and call state
    • Reset the ladder on recovery or poor signal, cancelling any pending timer

    Non-responsibilities:
    • No validation probing (ConnectivityMonitor)
    • No action execution (RecoveryCallback)

    Every transition runs on the looper. Only on_validation_status_changed(),
    reload_policy() and the read-only properties are meant for other threads.
    """

    def __init__(
        self,
        looper: Looper,
        monitor: ConnectivityMonitor,
        signal: SignalQualityProvider,
        calls: CallStateProvider,
        callback: RecoveryCallback,
        policy_source: Callable[[], RecoveryPolicy] = RecoveryPolicy.from_env,
        metrics: RecoveryMetrics | None = None,
    ):
        # ─── Dependencies ───
        self.looper = looper
        self.monitor = monitor
        self.signal = signal
        self.calls = calls
        self.callback = callback
        self.metrics = metrics or RecoveryMetrics()
        self.logger = get_logger("recovery_controller")

        # ─── Runtime State ───
        self._action: RecoveryAction = RecoveryAction.NONE
        self._timer: Message | None = None
        self._dispatched: bool = False  # current step performed this episode
        self._internet_valid: bool = True
        self._episode: StallEpisode | None = None

        # ─── Configuration ───
        self._policy_source = policy_source
        self.policy: RecoveryPolicy | None = self._load_policy(policy_source)

        self.monitor.register_callback(self.on_validation_status_changed)

    # ──────────────────────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────────────────────

    def on_validation_status_changed(self, valid: bool) -> None:
        """
        ConnectivityMonitor listener. Queues the transition on the looper.
        """
        self.looper.post(
            self._handle_validation_status, bool(valid), what="validation_status"
        )

    def reload_policy(self, source: Callable[[], RecoveryPolicy] | None = None) -> None:
        """
        Replace the policy wholesale. The current episode is reset first.
        """
        self.looper.post(
            self._handle_reload, source or self._policy_source, what="reload_policy"
        )

    @property
    def recovery_action(self) -> RecoveryAction:
        return self._action

    def set_recovery_action(self, action: int) -> None:
        """
        Force the ladder to `action` (operations and tests).

        Raises:
            ValueError: if `action` is not a RecoveryAction index.
        """
        self._action = RecoveryAction(action)
        self._dispatched = False
        self.logger.debug(f"Recovery action set to {self._action}")

    @property
    def is_recovery_pending(self) -> bool:
        return self._timer is not None and not self._timer.cancelled

    def close(self) -> None:
        """
        Unregister from the monitor and cancel any pending escalation.
        """
        self.monitor.unregister_callback(self.on_validation_status_changed)
        self._reset(ResetReason.TEARDOWN)
        self.logger.info("Recovery controller closed")

    def summary(self) -> dict[str, object]:
        return {
            "recovery_action": str(self._action),
            "recovery_pending": self.is_recovery_pending,
            "internet_valid": self._internet_valid,
            "episode_actions": (
                [str(a) for a in self._episode.actions] if self._episode else []
            ),
            "policy": self.policy.summary() if self.policy else None,
        }

    # ──────────────────────────────────────────────────────────────
    # Looper handlers
    # ──────────────────────────────────────────────────────────────

    def _handle_validation_status(self, valid: bool) -> None:
        was_valid = self._internet_valid
        self._internet_valid = valid

        if valid:
            if self._action != RecoveryAction.NONE or self._episode or self._timer:
                tlog(
                    self.logger,
                    "💚",
                    "RECOVERY",
                    "RECOVERED",
                    primary="internet validated",
                    meta=f"last_action={self._action}",
                )
                self._reset(ResetReason.RECOVERED)
            return

        if was_valid:
            self.logger.warning("Internet validation failed on active data network")

        if self._episode is None:
            self._episode = StallEpisode(started_at=self.looper.clock())

        if self.is_recovery_pending:
            # Delay not elapsed: only a poor signal acts before the timer fires
            if self._reset_on_poor_signal():
                return
            self.logger.debug(f"Escalation pending for {self._action}; not-valid ignored")
            return

        self._evaluate(escalate=False)

    def _handle_recovery_timer(self) -> None:
        self._timer = None

        if self._internet_valid:
            return

        self._evaluate(escalate=True)

    def _handle_reload(self, source: Callable[[], RecoveryPolicy]) -> None:
        self._reset(ResetReason.RELOAD)
        self.policy = self._load_policy(source)

        # Still stalled: start a fresh episode under the new policy
        if not self._internet_valid and self.policy is not None:
            self._episode = StallEpisode(started_at=self.looper.clock())
            self._evaluate(escalate=False)

    # ──────────────────────────────────────────────────────────────
    # Decision logic
    # ──────────────────────────────────────────────────────────────

    def _evaluate(self, escalate: bool) -> None:
        """
        Apply guards and pick the action for this not-valid evaluation.

        `escalate` is True when the delay for the current step has elapsed.
        """
        if self.policy is None:
            self._emit_suppressed("recovery disabled (configuration error)")
            return

        verdict = evaluate_guards(
            self.signal, self.calls, self.policy.poor_signal_threshold
        )

        if verdict == GuardVerdict.POOR_SIGNAL:
            self._emit_suppressed("poor signal", meta=f"action={self._action} → NONE")
            self._reset(ResetReason.POOR_SIGNAL)
            return

        target = self._select_action(escalate)
        if not self.policy.is_eligible(target):
            self._emit_suppressed("no eligible recovery step", meta=f"action={self._action}")
            return

        if verdict.holds and not self._allowed_during_call(verdict, target):
            self._hold(verdict)
            return

        self._execute(target)

    def _reset_on_poor_signal(self) -> bool:
        """
        Signal-only check for not-valid reports that arrive mid-delay.
        """
        if self.policy is None:
            return False

        verdict = evaluate_guards(
            self.signal, self.calls, self.policy.poor_signal_threshold
        )
        if verdict != GuardVerdict.POOR_SIGNAL:
            return False

        self._emit_suppressed("poor signal", meta=f"action={self._action} → NONE")
        self._reset(ResetReason.POOR_SIGNAL)
        return True

    def _select_action(self, escalate: bool) -> RecoveryAction:
        if self._action == RecoveryAction.NONE:
            return self.policy.first_step()

        if not self.policy.is_eligible(self._action):
            return self.policy.next_step(self._action)

        # Only a step that was actually performed is escalated past
        if escalate and self._dispatched:
            return self.policy.next_step(self._action)

        # Fresh not-valid, or retry after a hold: perform the current step
        return self._action

    def _allowed_during_call(self, verdict: GuardVerdict, target: RecoveryAction) -> bool:
        """
        Only the first, radio-neutral step may run during a call, and only
        when the policy allows it.
        """
        return (
            verdict == GuardVerdict.IN_CALL
            and self.policy.reestablish_during_call
            and self._action == RecoveryAction.NONE
            and target == RecoveryAction.REESTABLISH_INTERNET
        )

    def _hold(self, verdict: GuardVerdict) -> None:
        tlog(
            self.logger,
            "🟡",
            "RECOVERY",
            "HOLD",
            primary=str(verdict),
            meta=f"action={self._action}",
        )
        self._notify_metrics("on_hold", self._action, verdict)

        # Re-check after the current step's delay
        self._schedule_timer(self.policy.delay_for(self._action))

    def _execute(self, action: RecoveryAction) -> None:
        """
        Advance to `action`, dispatch it once, and arm the escalation timer.
        """
        self._action = action
        self._dispatched = True
        if self._episode is None:
            self._episode = StallEpisode(started_at=self.looper.clock())
        self._episode.actions.append(action)

        delay_s = self.policy.delay_for(action)
        tlog(
            self.logger,
            RECOVERY_ACTION_EMOJI[action],
            "RECOVERY",
            "TRIGGER",
            primary=str(action),
            meta=f"next_check={delay_s:g}s",
        )
        self._notify_metrics("on_escalation", action, self._episode)

        success = self._perform(action)
        tlog(
            self.logger,
            "🟢" if success else "🔴",
            "RECOVERY",
            "ISSUED" if success else "FAILED",
            primary=str(action),
        )

        # The timer is the retry mechanism, whether or not dispatch succeeded
        self._schedule_timer(delay_s)

    def _perform(self, action: RecoveryAction) -> bool:
        handler = getattr(self.callback, ACTION_CALLBACKS[action])

        try:
            result = handler()
        except Exception as e:
            self.logger.exception(f"Recovery action {action} raised")
            self._surface_failure(action, f"{type(e).__name__}: {e}")
            return False

        if result is False:
            self._surface_failure(action, "action not carried out")
            return False

        return True

    # ──────────────────────────────────────────────────────────────
    # State helpers
    # ──────────────────────────────────────────────────────────────

    def _schedule_timer(self, delay_s: float) -> None:
        self._cancel_timer()
        self._timer = self.looper.post_delayed(
            delay_s, self._handle_recovery_timer, what="recovery_timer"
        )

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _reset(self, reason: ResetReason) -> None:
        """
        Return to NONE, cancel the pending timer and close the episode.
        """
        self._cancel_timer()

        previous = self._action
        self._action = RecoveryAction.NONE
        self._dispatched = False

        episode = self._episode
        self._episode = None
        if episode is None and previous == RecoveryAction.NONE:
            return

        if episode is not None:
            episode.close(self.looper.clock(), reason)

        tlog(
            self.logger,
            "⚪",
            "RECOVERY",
            "RESET",
            primary=str(reason),
            meta=f"{previous} → NONE",
        )
        self._notify_metrics("on_reset", previous, episode)

    def _load_policy(self, source: Callable[[], RecoveryPolicy]) -> RecoveryPolicy | None:
        try:
            policy = source()
        except ConfigurationError as e:
            self.logger.error(f"Recovery policy rejected: {e}")
            self._surface_failure(RecoveryAction.NONE, f"configuration error: {e}")
            return None

        self.logger.info(f"Recovery policy loaded: {policy.summary()}")
        return policy

    def _surface_failure(self, action: RecoveryAction, reason: str) -> None:
        try:
            self.callback.on_recovery_failure(action, reason)
        except Exception:
            self.logger.exception("Recovery failure callback raised")

    def _notify_metrics(self, event: str, *args) -> None:
        try:
            getattr(self.metrics, event)(*args)
        except Exception as e:
            self.logger.warning(f"Metrics {event} failed ({type(e).__name__}: {e})")

    # ──────────────────────────────────────────────────────────────
    # Telemetry helpers
    # ──────────────────────────────────────────────────────────────

    def _emit_suppressed(self, reason: str, meta: str | None = None) -> None:
        tlog(
            self.logger,
            "🟡",
            "RECOVERY",
            "SUPPRESSED",
            primary=reason,
            meta=meta,
        )
