"""Error taxonomy for the vanity search engine."""

from enum import Enum
from typing import List, Sequence


class ErrorKind(Enum):
    """Kinds of failure a search can terminate with."""
    GENERATION = "generation"
    WORKER_CRASHED = "worker_crashed"


class VanityError(Exception):
    """Base class for every error raised by vanity_miner."""


class ValidationError(VanityError):
    """Criteria or budget are unusable. Raised before any key is generated."""

    def __init__(self, issues: Sequence[str]):
        self.issues: List[str] = list(issues)
        super().__init__("; ".join(self.issues) or "invalid search options")


class GenerationError(VanityError):
    """The randomness source or key derivation backend failed. Never retried."""


class BusyError(VanityError):
    """A dispatcher was asked to start while its worker is still active."""


class WorkerCrashed(VanityError):
    """The isolated worker died without delivering a terminal message."""

    def __init__(self, exitcode=None):
        self.exitcode = exitcode
        super().__init__(f"Worker process terminated unexpectedly (exit code {exitcode})")


class UnsupportedVariantError(VanityError, ValueError):
    """Unknown address variant tag."""

    def __init__(self, variant):
        self.variant = variant
        super().__init__(f"Unsupported address variant: {variant!r}")
