import pytest
import logging
from stall_recovery.logger import TIMING, setup_logging, get_logger


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Root handlers point at capsys streams; put the originals back"""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize(
    "level, message, expected_in_output",
    [
        (logging.DEBUG, "Re-establishing data network", True),
        (logging.INFO, "Internet validation failed", True),
        (logging.WARNING, "Signal level below threshold", True),
        (logging.ERROR, "Modem reboot request rejected", True),
        (logging.CRITICAL, "Recovery looper stopped unexpectedly", True),
    ],
)

def test_logger_configuration(capsys, level, message, expected_in_output):
    """Smoke test to ensure logger setup produces expected formatted output at various levels"""
    setup_logging(level=logging.DEBUG)  # always capture all messages
    logger = get_logger("test")

    logger.log(level, message)

    captured = capsys.readouterr()
    assert (message in captured.out) is expected_in_output
    assert "stall_recovery.test" in captured.out

@pytest.mark.parametrize("log_timing", [True, False])
def test_timing_filter(capsys, log_timing):
    """TIMING records only appear when timing logs are enabled"""
    setup_logging(level=logging.DEBUG, log_timing=log_timing)
    logger = get_logger("looper")

    logger.timing("Timing | recovery_timer [     0.1 ms]")

    captured = capsys.readouterr()
    assert ("recovery_timer" in captured.out) is log_timing
    assert logging.getLevelName(TIMING) == "TIME"
