from vanity_miner.facade import SearchRequest, VanityFacade
from vanity_miner.matcher import PatternMatcher, detect_format, matches, validate_criteria
from vanity_miner.models import BASE58_FORMAT, HEX_FORMAT, SearchCriteria

SOL_ADDRESS = "AbCdEfGhJkMnPqRsTuVwXyZ123456789abcdefghijk"
EVM_ADDRESS = "0x7e5f4552091a69125d5dfcb7b8c2659029395bdf"


def test_constraints_are_anded():
    criteria = SearchCriteria(prefix="AbC", suffix="ijk", substring="XyZ", case_sensitive=True)
    assert matches(SOL_ADDRESS, criteria)
    assert not matches(SOL_ADDRESS, SearchCriteria(prefix="AbC", suffix="zzz",
                                                   case_sensitive=True))


def test_case_insensitive_folds_both_sides():
    criteria = SearchCriteria(prefix="abcdef", case_sensitive=False)
    assert matches(SOL_ADDRESS, criteria)
    assert not matches(SOL_ADDRESS, SearchCriteria(prefix="abcdef", case_sensitive=True))


def test_hex_prefix_is_never_matched():
    matcher = PatternMatcher(HEX_FORMAT)
    assert matcher.matches(EVM_ADDRESS, SearchCriteria(prefix="7e5f"))
    assert not matcher.matches(EVM_ADDRESS, SearchCriteria(prefix="0x7e"))
    assert not matcher.matches(EVM_ADDRESS, SearchCriteria(substring="x7"))


def test_uppercase_pattern_matches_lowercase_hex_when_insensitive():
    matcher = PatternMatcher(HEX_FORMAT)
    assert matcher.matches(EVM_ADDRESS, SearchCriteria(suffix="5BDF", case_sensitive=False))


def test_pattern_longer_than_address_is_false():
    criteria = SearchCriteria(substring="a" * 60)
    assert matches(SOL_ADDRESS, criteria) is False


def test_validate_accepts_good_criteria():
    assert validate_criteria(SearchCriteria(prefix="Sol", suffix="9"), BASE58_FORMAT) == []
    assert validate_criteria(SearchCriteria(prefix="DEAD"), HEX_FORMAT) == []


def test_validate_requires_a_constraint():
    issues = validate_criteria(SearchCriteria(), BASE58_FORMAT)
    assert len(issues) == 1


def test_validate_rejects_excluded_base58_characters():
    issues = validate_criteria(SearchCriteria(prefix="0O", substring="Il"), BASE58_FORMAT)
    assert len(issues) == 2
    assert "0, O" in issues[0]
    assert "I, l" in issues[1]


def test_validate_rejects_non_hex():
    issues = validate_criteria(SearchCriteria(suffix="xyz"), HEX_FORMAT)
    assert len(issues) == 1
    assert "Ends with" in issues[0]


def test_validate_rejects_case_sensitive_uppercase_hex():
    issues = validate_criteria(SearchCriteria(prefix="AB", case_sensitive=True), HEX_FORMAT)
    assert len(issues) == 1
    assert "lowercase" in issues[0]


def test_validate_rejects_overlong_pattern():
    issues = validate_criteria(SearchCriteria(prefix="a" * 41), HEX_FORMAT)
    assert len(issues) == 1
    assert "longer" in issues[0]


def test_found_hex_result_matches_without_format():
    criteria = SearchCriteria(prefix="ab")
    outcome = VanityFacade().run(SearchRequest("hex", criteria))
    address = outcome.result.address

    assert address.startswith("0xab")
    assert matches(address, criteria)
    assert PatternMatcher().matches(address, criteria)
    assert PatternMatcher("evm").matches(address, criteria)


def test_detect_format():
    assert detect_format(EVM_ADDRESS) is HEX_FORMAT
    assert detect_format(SOL_ADDRESS) is BASE58_FORMAT


def test_variant_tag_resolves_format():
    assert PatternMatcher("solana").address_format is BASE58_FORMAT
    assert not matches(EVM_ADDRESS, SearchCriteria(prefix="0x"), "hex")
