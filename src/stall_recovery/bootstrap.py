# ─── Standard library imports ───
from dataclasses import dataclass
from urllib.parse import urlparse

# ─── Project imports ───
from .config import Config
from .utils import ping_host, split_csv
from .logger import get_logger


logger = get_logger("bootstrap")

@dataclass(frozen=True)
class EnvCapabilities:
    """
    Observed runtime capabilities derived at startup.

    These represent what the system is actually capable of doing,
    not what it is configured to do in theory.
    """
    modem_api_reachable: bool
    probe_hosts: tuple[str, ...]

def bootstrap() -> EnvCapabilities:
    """
    Validate runtime configuration and derive startup capabilities.

    Hard invariant violations raise and abort startup.
    Soft reachability checks are logged only; the recovery step table is
    validated by the controller itself, which degrades instead of aborting.
    """
    probe_hosts = _validate_invariants()
    return discover_runtime_capabilities(probe_hosts)

def _validate_invariants() -> tuple[str, ...]:
    """
    Validate settings without which the agent cannot run at all.
    """
    probe_hosts = tuple(split_csv(Config.CHECK_HOSTS))
    if not probe_hosts:
        raise ValueError("CHECK_HOSTS is empty; nothing to validate connectivity against")

    if Config.CHECK_INTERVAL <= 0:
        raise ValueError(f"CHECK_INTERVAL must be positive (got {Config.CHECK_INTERVAL})")

    parsed = urlparse(Config.Hardware.MODEM_API_URL)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ValueError(f"MODEM_API_URL is not an http(s) URL: {Config.Hardware.MODEM_API_URL!r}")

    return probe_hosts

def discover_runtime_capabilities(probe_hosts: tuple[str, ...]) -> EnvCapabilities:
    """
    Perform a non-fatal reachability check of the modem API.

    Failure is logged for visibility but does not prevent startup;
    the modem may still be booting.
    """
    parsed = urlparse(Config.Hardware.MODEM_API_URL)
    port = parsed.port or (443 if parsed.scheme == "https" else 80)

    reachable = ping_host(parsed.hostname, port=port)
    if reachable:
        logger.info(f"Modem API reachable at startup ({parsed.hostname}:{port})")
    else:
        logger.warning(f"Modem API NOT reachable at startup ({parsed.hostname}:{port})")

    return EnvCapabilities(
        modem_api_reachable=reachable,
        probe_hosts=probe_hosts,
    )
