# --- Standard library imports ---
import os

# --- Third-party imports ---
from dotenv import load_dotenv


# Load .env once
load_dotenv()

class Config:
    """Centralized config for recovery policy, observability and modem hardware"""

    # --- Recovery Policy (raw, parsed by RecoveryPolicy.from_env) ---
    RECOVERY_DELAYS_S = os.getenv("RECOVERY_DELAYS_S", "180,180,180")
    RECOVERY_SKIP_STEPS = os.getenv("RECOVERY_SKIP_STEPS", "false,false,false")

    try:
        POOR_SIGNAL_THRESHOLD = int(os.getenv("POOR_SIGNAL_THRESHOLD", 2))
    except ValueError:
        POOR_SIGNAL_THRESHOLD = 2

    REESTABLISH_DURING_CALL = (
        os.getenv("REESTABLISH_DURING_CALL", "true").lower() == "true"
    )
    ALLOW_RADIO_RECOVERY = (
        os.getenv("ALLOW_RADIO_RECOVERY", "true").lower() == "true"
    )

    # --- Network Policy (NOT user configurable) ---
    API_TIMEOUT = 2   # seconds (LAN device: fast-fail)

    # --- Observability Policy ---
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_TIMING = os.getenv("LOG_TIMING", "false").lower() == "true"

    # --- Validation Probe ---
    CHECK_HOSTS = os.getenv("CHECK_HOSTS", "8.8.8.8,1.1.1.1")

    try:
        CHECK_PORT = int(os.getenv("CHECK_PORT", 53))
    except ValueError:
        CHECK_PORT = 53

    try:
        CHECK_INTERVAL = int(os.getenv("CHECK_INTERVAL", 30))
    except ValueError:
        CHECK_INTERVAL = 30

    # --- Hardware ---
    class Hardware:
        MODEM_API_URL = os.getenv("MODEM_API_URL", "http://192.168.0.1/api")
