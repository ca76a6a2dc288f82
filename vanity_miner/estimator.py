"""
Difficulty estimates for a set of criteria.

The case-insensitive multiplier ``min(2**L, alphabet_size)`` is a heuristic:
not every Base58 symbol has a case pair, so the real match set is smaller.
Displayed difficulty is calibrated against this heuristic, keep it as is.
"""

import math
from fractions import Fraction
from typing import Union

from .models import UNBOUNDED, AddressFormat, SearchCriteria

Estimate = Union[int, float, type(UNBOUNDED)]


def _probability(criteria: SearchCriteria, address_format: AddressFormat) -> Fraction:
    size = address_format.alphabet_size
    body_length = address_format.body_length
    per_char = Fraction(1, size)
    probability = Fraction(1)

    for pattern, positional in ((criteria.prefix, False), (criteria.suffix, False),
                                (criteria.substring, True)):
        if not pattern:
            continue
        length = len(pattern)
        if length > body_length:
            return Fraction(0)
        probability *= per_char ** length
        if not criteria.case_sensitive:
            probability *= min(2 ** length, size)
        if positional:
            probability *= body_length - length + 1

    return min(probability, Fraction(1))


def estimate_probability(criteria: SearchCriteria, address_format: AddressFormat) -> float:
    """Chance that a single attempt matches, in [0, 1]."""
    return float(_probability(criteria, address_format))


def estimate_expected_attempts(criteria: SearchCriteria,
                               address_format: AddressFormat) -> Estimate:
    probability = _probability(criteria, address_format)
    if probability == 0:
        return UNBOUNDED
    inverse = 1 / probability
    return math.ceil(inverse)


def estimate_expected_duration(criteria: SearchCriteria, address_format: AddressFormat,
                               throughput_per_second: int = None) -> Estimate:
    """Expected search time in milliseconds."""
    attempts = estimate_expected_attempts(criteria, address_format)
    if attempts is UNBOUNDED:
        return UNBOUNDED
    rate = throughput_per_second or address_format.throughput_per_second
    return attempts / rate * 1000


# ============================================================
# Formatting Utilities
# ============================================================

def format_duration(milliseconds) -> str:
    if milliseconds is UNBOUNDED:
        return "∞"
    seconds = milliseconds / 1000
    if seconds < 1:
        return "< 1s"
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        return f"{seconds/60:.1f}min"
    elif seconds < 86400:
        return f"{seconds/3600:.1f}hrs"
    elif seconds < 31536000:
        return f"{seconds/86400:.1f}days"
    else:
        return f"{seconds/31536000:.2f}yrs"


def format_number(num) -> str:
    if num is UNBOUNDED:
        return "∞"
    if num < 1000:
        return str(int(num))
    elif num < 1000000:
        return f"{num/1000:.1f}K"
    elif num < 1000000000:
        return f"{num/1000000:.2f}M"
    else:
        return f"{num/1000000000:.2f}B"


def format_probability(probability: float) -> str:
    if probability <= 0:
        return "0 (impossible)"
    expected = 1 / probability
    if expected >= 1e12:
        return f"1/{expected:.2e}"
    return f"1/{expected:,.0f}"
