# --- Standard library imports ---
import socket

# --- Project imports ---
from .logger import get_logger


# Define the logger once for the entire module
logger = get_logger("utils")

TRUE_STRINGS = {"1", "true", "yes", "on"}
FALSE_STRINGS = {"0", "false", "no", "off"}

def ping_host(host: str, port: int = 53, timeout: float = 1.0) -> bool:
    """
    Check host reachability with a TCP connect (Layer 4).

    Avoids ICMP so no admin privileges are required.

    Args:
        host: IP address or hostname to check.
        port: TCP port to attempt (default 53, DNS over TCP).
        timeout: Seconds before giving up.

    Returns:
        True if the host accepted the connection, False otherwise.
    """
    if not host:
        return False

    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError as e:
        logger.debug(f"{host}:{port} unreachable ({e.__class__.__name__})")
        return False

def split_csv(raw: str) -> list[str]:
    """Split a comma-separated env value, dropping blanks."""
    return [item.strip() for item in (raw or "").split(",") if item.strip()]

def parse_csv_floats(raw: str) -> list[float]:
    """
    Parse "180,180,60" into floats.

    Raises:
        ValueError: if any entry is not a number.
    """
    values = []
    for item in split_csv(raw):
        try:
            values.append(float(item))
        except ValueError:
            raise ValueError(f"not a number: {item!r} in {raw!r}") from None
    return values

def parse_csv_bools(raw: str) -> list[bool]:
    """
    Parse "false,true,0" into booleans.

    Raises:
        ValueError: if any entry is not a recognized boolean string.
    """
    values = []
    for item in split_csv(raw):
        lowered = item.lower()
        if lowered in TRUE_STRINGS:
            values.append(True)
        elif lowered in FALSE_STRINGS:
            values.append(False)
        else:
            raise ValueError(f"not a boolean: {item!r} in {raw!r}")
    return values
