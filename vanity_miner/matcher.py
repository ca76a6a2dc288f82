"""Pattern matching and criteria validation."""

from typing import List, Optional, Union

from .keygen import GENERATORS, resolve_variant
from .models import BASE58_FORMAT, HEX_FORMAT, AddressFormat, SearchCriteria, Variant

FormatLike = Union[AddressFormat, Variant, str, None]


def detect_format(address: str) -> AddressFormat:
    """Infer the address format from its shape.

    Unambiguous: ``0`` is not a Base58 symbol, so no Base58 address starts with ``0x``.
    """
    hex_length = len(HEX_FORMAT.prefix) + HEX_FORMAT.body_length
    if address.startswith(HEX_FORMAT.prefix) and len(address) == hex_length:
        return HEX_FORMAT
    return BASE58_FORMAT


def _resolve_format(address_format: FormatLike) -> Optional[AddressFormat]:
    if address_format is None or isinstance(address_format, AddressFormat):
        return address_format
    return GENERATORS[resolve_variant(address_format)].address_format


class PatternMatcher:
    """Stateless predicate over an address and a set of criteria.

    ``address_format`` may be an AddressFormat or a variant tag. Without one,
    the format is detected per address, so the ``0x`` of hex addresses is
    never matched either way. Criteria are assumed well-formed; see
    :func:`validate_criteria`.
    """

    __slots__ = ("address_format",)

    def __init__(self, address_format: FormatLike = None):
        self.address_format = _resolve_format(address_format)

    def matches(self, address: str, criteria: SearchCriteria) -> bool:
        address_format = self.address_format or detect_format(address)
        body = address_format.body(address)
        prefix, suffix, substring = criteria.prefix, criteria.suffix, criteria.substring

        if not criteria.case_sensitive:
            body = body.lower()
            prefix, suffix, substring = prefix.lower(), suffix.lower(), substring.lower()

        if prefix and not body.startswith(prefix):
            return False
        if suffix and not body.endswith(suffix):
            return False
        if substring and substring not in body:
            return False
        return True


def matches(address: str, criteria: SearchCriteria,
            address_format: FormatLike = None) -> bool:
    return PatternMatcher(address_format).matches(address, criteria)


def validate_criteria(criteria: SearchCriteria, address_format: AddressFormat) -> List[str]:
    """Return a list of human-readable issues; empty means the criteria are usable."""
    issues = []

    if criteria.is_empty:
        issues.append("At least one of starts with, ends with or contains must be specified")
        return issues

    alphabet = set(address_format.alphabet)
    if address_format.lowercase_only:
        alphabet |= set(address_format.alphabet.upper())

    for label, pattern in criteria.constraints():
        invalid = []
        for c in pattern:
            if c not in alphabet and c not in invalid:
                invalid.append(c)
        if invalid:
            issues.append(
                f'"{label}" cannot contain: {", ".join(invalid)} '
                f"(not in the {address_format.variant.value} alphabet)")
            continue

        if address_format.lowercase_only and criteria.case_sensitive and pattern != pattern.lower():
            issues.append(
                f'"{label}" uses uppercase letters but {address_format.variant.value} '
                "addresses are lowercase; disable case-sensitive matching")

        if len(pattern) > address_format.body_length:
            issues.append(
                f'"{label}" is longer than the {address_format.body_length}-character address')

    return issues
