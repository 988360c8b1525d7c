import pytest
from unittest.mock import Mock

from stall_recovery.guards import CallState, SIGNAL_LEVEL_GOOD
from stall_recovery.looper import Looper
from stall_recovery.connectivity_monitor import ConnectivityMonitor
from stall_recovery.recovery_controller import RecoveryController, RecoveryCallback
from stall_recovery.recovery_policy import RecoveryPolicy


# ================
# TEST COLLABORATORS
# ================
class ManualClock:
    """Monotonic clock that only moves when a test says so."""
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class FakeSignal:
    def __init__(self, level: int = SIGNAL_LEVEL_GOOD):
        self.level = level
        self.error: Exception | None = None
        self.calls = 0

    def current_level(self) -> int:
        self.calls += 1
        if self.error:
            raise self.error
        return self.level


class FakeCalls:
    def __init__(self, state: CallState = CallState.IDLE):
        self.state = state
        self.error: Exception | None = None

    def current_state(self) -> CallState:
        if self.error:
            raise self.error
        return self.state


def move_time_forward(looper: Looper, clock: ManualClock, seconds: float) -> None:
    """
    Advance the clock, running each due message at its own due time.
    """
    target = clock.now + seconds
    looper.run_pending()
    while (due := looper.next_due()) is not None and due <= target:
        clock.now = max(clock.now, due)
        looper.run_pending()
    clock.now = target
    looper.run_pending()


# ========
# FIXTURES
# ========
@pytest.fixture
def clock():
    return ManualClock()

@pytest.fixture
def looper(clock):
    return Looper(name="test_looper", clock=clock)

@pytest.fixture
def monitor():
    return ConnectivityMonitor()

@pytest.fixture
def signal():
    return FakeSignal()

@pytest.fixture
def calls():
    return FakeCalls()

@pytest.fixture
def callback():
    return Mock(spec=RecoveryCallback)

@pytest.fixture
def policy():
    return RecoveryPolicy.from_arrays(delays_s=[1, 1, 1], skips=[False, False, False])

@pytest.fixture
def make_controller(looper, monitor, signal, calls, callback, policy):
    """Factory so tests can swap the policy source or metrics."""
    def _make(policy_source=None, metrics=None):
        return RecoveryController(
            looper=looper,
            monitor=monitor,
            signal=signal,
            calls=calls,
            callback=callback,
            policy_source=policy_source or (lambda: policy),
            metrics=metrics,
        )
    return _make

@pytest.fixture
def controller(make_controller):
    return make_controller()
