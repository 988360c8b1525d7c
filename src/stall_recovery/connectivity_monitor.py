# ─── Future imports ───
from __future__ import annotations

# ─── Standard library imports ───
from typing import Callable, Sequence

# ─── Project imports ───
from .logger import get_logger
from .looper import Looper, Message
from .utils import ping_host


ValidationListener = Callable[[bool], None]


class ConnectivityMonitor:
    """
    Source of internet validation transitions for the active data network.

    Listeners are told only about transitions (valid ⇄ not valid), never
    about repeated identical results.
    """

    def __init__(self):
        self.logger = get_logger("connectivity_monitor")
        self._listeners: list[ValidationListener] = []
        self._valid: bool | None = None

    @property
    def valid(self) -> bool | None:
        """Last reported status, or None before the first report."""
        return self._valid

    def register_callback(self, listener: ValidationListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unregister_callback(self, listener: ValidationListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def report(self, valid: bool) -> bool:
        """
        Record a validation result and notify listeners on change.

        Returns:
            True if this result was a transition.
        """
        if valid == self._valid:
            return False

        self._valid = valid
        self.logger.info(
            f"{'🌐' if valid else '🚫'} Internet validation "
            f"[{'VALID' if valid else 'NOT_VALID'}]"
        )
        for listener in list(self._listeners):
            listener(valid)
        return True


class ProbeConnectivityMonitor(ConnectivityMonitor):
    """
    Periodic TCP reachability probe scheduled on the looper.

    The network is considered validated when any probe host answers.
    """

    def __init__(
        self,
        looper: Looper,
        hosts: Sequence[str],
        port: int = 53,
        interval_s: float = 30.0,
        timeout_s: float = 1.0,
        probe: Callable[..., bool] = ping_host,
    ):
        super().__init__()
        if not hosts:
            raise ValueError("at least one probe host is required")

        self.looper = looper
        self.hosts = tuple(hosts)
        self.port = port
        self.interval_s = interval_s
        self.timeout_s = timeout_s
        self._probe = probe
        self._next: Message | None = None

    def check_once(self) -> bool:
        """Probe hosts in order; first success wins."""
        return any(
            self._probe(host, port=self.port, timeout=self.timeout_s)
            for host in self.hosts
        )

    def _tick(self) -> None:
        self.report(self.check_once())
        self._next = self.looper.post_delayed(self.interval_s, self._tick, what="probe")

    def start(self) -> None:
        if self._next is None:
            self._next = self.looper.post(self._tick, what="probe")

    def stop(self) -> None:
        if self._next is not None:
            self._next.cancel()
            self._next = None
