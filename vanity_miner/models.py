"""
Data model shared by the generator, matcher, estimator and controller.

All records are plain dataclasses so they can be pickled across the
dispatcher's process boundary.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from . import config


BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
HEX_ALPHABET = "0123456789abcdef"


class _Unbounded:
    """Expected attempts/duration when a match is impossible.

    Orders above every number so estimates stay comparable.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "UNBOUNDED"

    def __str__(self):
        return "∞"

    def __reduce__(self):
        return (_Unbounded, ())

    def __lt__(self, other):
        return False

    def __le__(self, other):
        return other is self

    def __gt__(self, other):
        return other is not self

    def __ge__(self, other):
        return True

    def __eq__(self, other):
        return other is self

    def __hash__(self):
        return hash("UNBOUNDED")


UNBOUNDED = _Unbounded()


class Variant(Enum):
    BASE58 = "base58"
    HEX = "hex"


@dataclass(frozen=True)
class AddressFormat:
    """How a variant's addresses look for matching and estimation."""
    variant: Variant
    alphabet: str
    body_length: int
    prefix: str = ""
    throughput_per_second: int = 1000
    lowercase_only: bool = False

    @property
    def alphabet_size(self) -> int:
        return len(self.alphabet)

    def body(self, address: str) -> str:
        """Strip the canonical prefix; patterns never match it."""
        if self.prefix and address.startswith(self.prefix):
            return address[len(self.prefix):]
        return address


BASE58_FORMAT = AddressFormat(
    variant=Variant.BASE58,
    alphabet=BASE58_ALPHABET,
    body_length=44,
    throughput_per_second=config.BASE58_THROUGHPUT,
)

HEX_FORMAT = AddressFormat(
    variant=Variant.HEX,
    alphabet=HEX_ALPHABET,
    body_length=40,
    prefix="0x",
    throughput_per_second=config.HEX_THROUGHPUT,
    lowercase_only=True,
)


@dataclass(frozen=True)
class SearchCriteria:
    prefix: str = ""
    suffix: str = ""
    substring: str = ""
    case_sensitive: bool = False

    def constraints(self):
        """Yield (label, pattern) for every non-empty constraint."""
        for label, pattern in (("Starts with", self.prefix),
                               ("Ends with", self.suffix),
                               ("Contains", self.substring)):
            if pattern:
                yield label, pattern

    @property
    def is_empty(self) -> bool:
        return not (self.prefix or self.suffix or self.substring)


@dataclass(frozen=True)
class SearchBudget:
    max_attempts: int = config.DEFAULT_MAX_ATTEMPTS
    max_duration_ms: int = config.DEFAULT_MAX_DURATION_MS


@dataclass
class SearchOptions:
    criteria: SearchCriteria
    budget: SearchBudget = field(default_factory=SearchBudget)
    # Object with put(event), or a callable taking the event
    progress: Optional[Any] = None
    cadence: int = config.PROGRESS_CADENCE


@dataclass
class KeypairRecord:
    public_identifier: str
    private_material: bytes = field(repr=False)
    variant: Variant
    public_key: bytes = b""
    mnemonic: Optional[str] = field(default=None, repr=False)


@dataclass
class SearchResult:
    record: KeypairRecord
    attempts: int
    elapsed_ms: int

    @property
    def address(self) -> str:
        return self.record.public_identifier


@dataclass(frozen=True)
class ProgressEvent:
    attempts: int
    elapsed_ms: int


class OutcomeKind(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


class NotFoundReason(Enum):
    ATTEMPTS_EXHAUSTED = "attempts_exhausted"
    TIME_EXHAUSTED = "time_exhausted"
    CANCELLED = "cancelled"


@dataclass
class SearchOutcome:
    """Found, NotFound{reason} or Error{kind}. Exactly one payload is set."""
    kind: OutcomeKind
    result: Optional[SearchResult] = None
    reason: Optional[NotFoundReason] = None
    error: Optional[Any] = None
    message: str = ""
    attempts: int = 0
    elapsed_ms: int = 0

    @classmethod
    def found(cls, result: SearchResult) -> "SearchOutcome":
        return cls(OutcomeKind.FOUND, result=result,
                   attempts=result.attempts, elapsed_ms=result.elapsed_ms)

    @classmethod
    def not_found(cls, reason: NotFoundReason, attempts: int = 0,
                  elapsed_ms: int = 0) -> "SearchOutcome":
        return cls(OutcomeKind.NOT_FOUND, reason=reason,
                   attempts=attempts, elapsed_ms=elapsed_ms)

    @classmethod
    def failed(cls, error, message: str = "", attempts: int = 0,
               elapsed_ms: int = 0) -> "SearchOutcome":
        return cls(OutcomeKind.ERROR, error=error, message=message,
                   attempts=attempts, elapsed_ms=elapsed_ms)

    @property
    def is_found(self) -> bool:
        return self.kind is OutcomeKind.FOUND
