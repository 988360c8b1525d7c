# --- Standard library imports ---
import sys
import logging

# --- Project imports ---
from .config import Config
from .bootstrap import bootstrap
from .logger import get_logger, setup_logging
from .looper import Looper
from .metrics import LoggingRecoveryMetrics
from .modem_client import ModemClient
from .connectivity_monitor import ProbeConnectivityMonitor
from .recovery_controller import RecoveryController
from .recovery_policy import RecoveryPolicy


def main():
    """
    Entry point for the data stall recovery agent.

    Wires the looper, validation probe, modem client and controller,
    then runs the looper until interrupted.
    """

    # Setup logging policy
    setup_logging(level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO))
    logger = get_logger("main")
    logger.info("🚀 Starting Data Stall Recovery Agent")
    logger.debug(f"Python version: {sys.version}")

    capabilities = bootstrap()

    looper = Looper(name="recovery_looper")
    modem = ModemClient()

    monitor = ProbeConnectivityMonitor(
        looper,
        hosts=capabilities.probe_hosts,
        port=Config.CHECK_PORT,
        interval_s=Config.CHECK_INTERVAL,
    )

    controller = RecoveryController(
        looper=looper,
        monitor=monitor,
        signal=modem,
        calls=modem,
        callback=modem,
        policy_source=RecoveryPolicy.from_env,
        metrics=LoggingRecoveryMetrics(),
    )

    monitor.start()
    try:
        looper.loop()
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
    finally:
        monitor.stop()
        controller.close()
        looper.quit()

if __name__ == "__main__":
    main()
