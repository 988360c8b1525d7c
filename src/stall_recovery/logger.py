# --- Standard library imports ---
import sys
import logging

# --- Project imports ---
from .config import Config


# --- Namespace ---
ROOT_LOGGER_NAME = "stall_recovery"

# --- Custom log levels ---
TIMING = 25   # Looper handler durations, above INFO so LOG_LEVEL=INFO keeps them
logging.addLevelName(TIMING, "TIME")

def timing(self, message, *args, **kwargs):
    """Logger.timing(): per-message looper durations."""
    if self.isEnabledFor(TIMING):
        self._log(TIMING, message, args, stacklevel=2, **kwargs)

logging.Logger.timing = timing

# --- Filters ---
class TimingFilter(logging.Filter):
    """Drop TIMING records (looper handler durations) unless enabled."""
    def __init__(self, enabled: bool):
        super().__init__()
        self.enabled = enabled

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == TIMING:
            return self.enabled
        return True

# --- Format configuration constants ---
LOG_LEVEL_EMOJIS = {
    logging.DEBUG: "🧱",
    logging.INFO: "🟢",
    TIMING: "⏱️ ",
    logging.WARNING: "⚠️ ",
    logging.ERROR: "❌",
    logging.CRITICAL: "🔥",
}

LEVEL_NAME_MAP = {
    "WARNING": "WARN",
    "CRITICAL": "FATAL",
}

# Chatty third-party loggers capped at WARNING
NOISY_LOGGERS = ("urllib3", "requests")

# --- Formatters ---
class EmojiFormatter(logging.Formatter):
    """Level emoji in front of each line so HOLD/RESET lines stand out in journald."""

    def format(self, record: logging.LogRecord) -> str:
        record.levelemoji = LOG_LEVEL_EMOJIS.get(record.levelno, "")
        record.levelname = LEVEL_NAME_MAP.get(record.levelname, record.levelname)
        return super().format(record)

# --- Public logging setup API ---
def setup_logging(level=logging.INFO, log_timing: bool | None = None) -> None:
    """
    Configure global logging with emoji decorations and optional TIMING logs.

    `log_timing` overrides Config.LOG_TIMING when given.
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = EmojiFormatter(
        fmt="%(asctime)s %(levelemoji)s %(name)s:%(funcName)s → %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)

    enabled = Config.LOG_TIMING if log_timing is None else log_timing
    handler.addFilter(TimingFilter(enabled=enabled))
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

def get_logger(name: str) -> logging.Logger:
    """
    Return a logger namespaced under the package (e.g. stall_recovery.looper).
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
