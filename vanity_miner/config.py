"""
Runtime defaults for the vanity search engine.

Every value may be overridden with a ``VANITY_MINER_<NAME>`` environment
variable (read once at import) and, for the CLI, with command line flags.
"""

import logging
import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(f"VANITY_MINER_{name}")
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.replace("_", ""))
    except ValueError:
        logging.getLogger(__name__).warning(
            "Ignoring VANITY_MINER_%s=%r (not an integer)", name, raw)
        return default
    return value if value > 0 else default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(f"VANITY_MINER_{name}")
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning(
            "Ignoring VANITY_MINER_%s=%r (not a number)", name, raw)
        return default


# ============================================================
# Constants Configuration
# ============================================================
DEFAULT_MAX_ATTEMPTS = _env_int("MAX_ATTEMPTS", 10_000_000)
DEFAULT_MAX_DURATION_MS = _env_int("MAX_DURATION_MS", 300_000)
PROGRESS_CADENCE = _env_int("PROGRESS_CADENCE", 1000)

# Rejected degenerate draws before the entropy source is declared broken
MAX_ENTROPY_REDRAWS = _env_int("MAX_ENTROPY_REDRAWS", 8)

# Attempts per second used for duration estimates
BASE58_THROUGHPUT = _env_int("BASE58_THROUGHPUT", 8000)
HEX_THROUGHPUT = _env_int("HEX_THROUGHPUT", 2000)
MNEMONIC_SLOWDOWN = _env_int("MNEMONIC_SLOWDOWN", 100)

# Worker process management (seconds)
WORKER_JOIN_TIMEOUT = _env_float("WORKER_JOIN_TIMEOUT", 5.0)
WORKER_POLL_INTERVAL = _env_float("WORKER_POLL_INTERVAL", 0.1)

SHOW_PARTIAL_CHARS = _env_int("SHOW_PARTIAL_CHARS", 4)

LOG_FORMAT = "[%(levelname)s %(asctime)s] %(message)s"


def setup_logging(debug: bool = False) -> None:
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO,
                        format=LOG_FORMAT)
