import pytest

from vanity_miner.estimator import (
    estimate_expected_attempts, estimate_expected_duration, estimate_probability,
    format_duration, format_number, format_probability,
)
from vanity_miner.models import BASE58_FORMAT, HEX_FORMAT, UNBOUNDED, SearchCriteria


def test_base58_case_insensitive_prefix_scenario():
    criteria = SearchCriteria(prefix="AB", case_sensitive=False)
    assert estimate_expected_attempts(criteria, BASE58_FORMAT) == 841


def test_hex_case_sensitive_prefix_has_no_case_multiplier():
    criteria = SearchCriteria(prefix="a1", case_sensitive=True)
    assert estimate_expected_attempts(criteria, HEX_FORMAT) == 256
    assert estimate_probability(criteria, HEX_FORMAT) == pytest.approx(1 / 256)


def test_case_multiplier_is_capped_at_alphabet_size():
    criteria = SearchCriteria(suffix="abcdef", case_sensitive=False)
    # min(2**6, 16) == 16
    assert estimate_expected_attempts(criteria, HEX_FORMAT) == 16 ** 6 // 16


def test_substring_counts_start_offsets():
    criteria = SearchCriteria(substring="abc", case_sensitive=True)
    # 38 offsets in a 40-character body
    assert estimate_probability(criteria, HEX_FORMAT) == pytest.approx(38 / 16 ** 3)
    assert estimate_expected_attempts(criteria, HEX_FORMAT) == 108


def test_probability_is_clamped_to_one():
    criteria = SearchCriteria(substring="a", case_sensitive=False)
    assert estimate_probability(criteria, HEX_FORMAT) == 1.0
    assert estimate_expected_attempts(criteria, HEX_FORMAT) == 1


def test_constraints_multiply():
    both = SearchCriteria(prefix="ab", suffix="cd", case_sensitive=True)
    assert estimate_expected_attempts(both, HEX_FORMAT) == 16 ** 4


def test_pattern_longer_than_address_is_unbounded():
    criteria = SearchCriteria(prefix="a" * 41, case_sensitive=True)
    assert estimate_probability(criteria, HEX_FORMAT) == 0.0
    assert estimate_expected_attempts(criteria, HEX_FORMAT) is UNBOUNDED
    assert estimate_expected_duration(criteria, HEX_FORMAT) is UNBOUNDED


@pytest.mark.parametrize("address_format", [BASE58_FORMAT, HEX_FORMAT])
@pytest.mark.parametrize("field", ["prefix", "suffix", "substring"])
@pytest.mark.parametrize("case_sensitive", [True, False])
def test_expected_attempts_never_decrease_with_length(address_format, field, case_sensitive):
    previous = 0
    for length in range(1, address_format.body_length + 3):
        criteria = SearchCriteria(**{field: "a" * length}, case_sensitive=case_sensitive)
        attempts = estimate_expected_attempts(criteria, address_format)
        assert attempts >= previous
        probability = estimate_probability(criteria, address_format)
        assert 0.0 <= probability <= 1.0
        previous = attempts
    assert previous is UNBOUNDED


def test_hex_duration_is_slower_than_base58():
    criteria = SearchCriteria(prefix="ab", case_sensitive=True)
    hex_ms = estimate_expected_duration(criteria, HEX_FORMAT)
    assert hex_ms == pytest.approx(256 / HEX_FORMAT.throughput_per_second * 1000)
    assert HEX_FORMAT.throughput_per_second < BASE58_FORMAT.throughput_per_second


def test_unbounded_orders_above_numbers():
    assert UNBOUNDED > 10 ** 100
    assert not UNBOUNDED < 1
    assert UNBOUNDED >= UNBOUNDED
    assert str(UNBOUNDED) == "∞"


def test_formatting():
    assert format_duration(UNBOUNDED) == "∞"
    assert format_duration(500) == "< 1s"
    assert format_duration(90_000) == "1.5min"
    assert format_number(841) == "841"
    assert format_number(2_500_000) == "2.50M"
    assert format_probability(1 / 256) == "1/256"
    assert format_probability(0) == "0 (impossible)"
