# --- Standard library imports ---
import logging


def tlog(
    logger: logging.Logger,
    emoji: str,
    subsystem: str,
    state: str,
    primary: str = "—--",
    meta: str | None = None,
    level: int = logging.INFO,
) -> None:
    """
    One fixed-width status line per recovery decision (TRIGGER, HOLD, RESET...).

    Columns line up across RECOVERY, METRICS and MODEM subsystems:
        SUBSYSTEM STATE PRIMARY | meta
    """
    msg = f"{subsystem:<12} {state:<20} {primary:<24}"
    if meta:
        msg += f" | {meta}"

    logger.log(level, f"{emoji} {msg}", stacklevel=2)
