"""
Multi-variant vanity address search engine.

Generates fresh keypairs and tests the derived address against a prefix,
suffix and/or substring, for Base58 (Solana) and hex (EVM) addresses.
"""

__version__ = "3.3.0"

from .controller import SearchController, SearchState
from .dispatcher import WorkerDispatcher
from .errors import (
    BusyError, ErrorKind, GenerationError, UnsupportedVariantError, ValidationError,
    VanityError, WorkerCrashed,
)
from .estimator import (
    estimate_expected_attempts, estimate_expected_duration, estimate_probability,
)
from .extract import ExtractedKeypair, extract_keypair
from .facade import SearchRequest, VanityFacade
from .keygen import Base58KeyGenerator, HexKeyGenerator, KeyGenerator, create_generator
from .matcher import PatternMatcher, detect_format, matches, validate_criteria
from .models import (
    BASE58_FORMAT, HEX_FORMAT, UNBOUNDED, KeypairRecord, NotFoundReason, OutcomeKind,
    ProgressEvent, SearchBudget, SearchCriteria, SearchOptions, SearchOutcome, SearchResult,
    Variant,
)
