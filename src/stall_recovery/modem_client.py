# --- Standard library imports ---
import time

# --- Third-party imports ---
import requests

# --- Project imports ---
from .config import Config
from .guards import CallState
from .logger import get_logger
from .recovery_action import RecoveryAction
from .recovery_controller import RecoveryCallback
from .telemetry import tlog


class ModemClient(RecoveryCallback):
    """
    Handles all communication with the modem management HTTP API.

    Serves three collaborator roles at once:
      - SignalQualityProvider (GET /status → signal_level)
      - CallStateProvider     (GET /status → call_state)
      - RecoveryCallback      (POST action endpoints)

    Design:
    - LAN-only, fast-fail semantics (no retries)
    - Success = command accepted, not device verified online
    """

    ENDPOINTS = {
        RecoveryAction.REESTABLISH_INTERNET: "/data/reestablish",
        RecoveryAction.RADIO_POWER_CYCLE: "/radio/power-cycle",
        RecoveryAction.MODEM_REBOOT: "/modem/reboot",
    }

    # One /status snapshot serves both guard reads of a single evaluation
    STATUS_MAX_AGE_S: float = 1.0

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        clock=time.monotonic,
    ):
        self.logger = get_logger("modem_client")
        self.base_url = (base_url or Config.Hardware.MODEM_API_URL).rstrip("/")
        self.timeout = Config.API_TIMEOUT if timeout is None else timeout
        self.session = requests.Session()
        self.clock = clock
        self._status: dict | None = None
        self._status_at: float = 0.0

    # ─── Status (guard providers) ───

    def get_status(self) -> dict:
        """
        Fetch the radio status, reusing a snapshot younger than STATUS_MAX_AGE_S.

        Raises:
            requests.RequestException: if the API is unreachable or errors.
        """
        now = self.clock()
        if self._status is not None and now - self._status_at < self.STATUS_MAX_AGE_S:
            return self._status

        self._status = None
        resp = self.session.get(f"{self.base_url}/status", timeout=self.timeout)
        resp.raise_for_status()
        self._status = resp.json()
        self._status_at = now
        return self._status

    def current_level(self) -> int:
        """
        Raises:
            ValueError: if the status payload carries no usable signal level.
        """
        level = self.get_status().get("signal_level")
        if not isinstance(level, int):
            raise ValueError(f"invalid signal_level: {level!r}")
        return level

    def current_state(self) -> CallState:
        """
        Raises:
            ValueError: if the status payload carries an unknown call state.
        """
        raw = str(self.get_status().get("call_state", "")).upper()
        try:
            return CallState[raw]
        except KeyError:
            raise ValueError(f"invalid call_state: {raw!r}") from None

    # ─── Actions (RecoveryCallback) ───

    def _request_action(self, action: RecoveryAction) -> bool:
        url = f"{self.base_url}{self.ENDPOINTS[action]}"
        try:
            self.session.post(url, timeout=self.timeout).raise_for_status()
            self.logger.debug(f"Modem accepted {action} → {url}")
            return True

        except requests.RequestException:
            self.logger.exception(f"Failed to request {action} from modem")
            return False

    def on_data_stall_reestablish_internet(self) -> bool:
        return self._request_action(RecoveryAction.REESTABLISH_INTERNET)

    def on_radio_power_cycle(self) -> bool:
        return self._request_action(RecoveryAction.RADIO_POWER_CYCLE)

    def on_modem_reboot(self) -> bool:
        return self._request_action(RecoveryAction.MODEM_REBOOT)

    def on_recovery_failure(self, action: RecoveryAction, reason: str) -> None:
        tlog(
            self.logger,
            "🔴",
            "MODEM",
            "FAILURE",
            primary=str(action),
            meta=reason,
        )
