import pytest

from vanity_miner import config
from vanity_miner.errors import UnsupportedVariantError, ValidationError
from vanity_miner.facade import SearchRequest, VanityFacade
from vanity_miner.matcher import matches
from vanity_miner.models import (
    HEX_FORMAT, UNBOUNDED, NotFoundReason, OutcomeKind, SearchBudget, SearchCriteria,
)


@pytest.fixture
def facade():
    return VanityFacade()


def test_unsupported_variant(facade):
    criteria = SearchCriteria(prefix="a")
    with pytest.raises(UnsupportedVariantError):
        facade.validate("bitcoin", criteria)
    with pytest.raises(UnsupportedVariantError):
        facade.estimate_probability("bitcoin", criteria)
    with pytest.raises(UnsupportedVariantError):
        facade.run(SearchRequest("bitcoin", criteria))


def test_estimates_route_by_variant(facade):
    assert facade.estimate_expected_attempts("solana", SearchCriteria(prefix="AB")) == 841
    hex_criteria = SearchCriteria(prefix="a1", case_sensitive=True)
    assert facade.estimate_expected_attempts("evm", hex_criteria) == 256
    assert facade.estimate_probability("hex", hex_criteria) == pytest.approx(1 / 256)
    assert facade.estimate_expected_duration("hex", SearchCriteria(prefix="a" * 41)) is UNBOUNDED


def test_mnemonic_duration_is_longer(facade):
    criteria = SearchCriteria(prefix="abc")
    fast = facade.estimate_expected_duration("base58", criteria)
    slow = facade.estimate_expected_duration("base58", criteria, use_mnemonic=True)
    assert slow > fast
    assert slow == pytest.approx(fast * config.MNEMONIC_SLOWDOWN)


def test_validate_routes_by_variant(facade):
    criteria = SearchCriteria(prefix="0x")
    assert facade.validate("hex", criteria)
    assert facade.validate("base58", SearchCriteria(prefix="abc")) == []


def test_run_rejects_invalid_criteria(facade):
    with pytest.raises(ValidationError):
        facade.run(SearchRequest("base58", SearchCriteria(suffix="l")))


def test_run_and_describe(facade):
    criteria = SearchCriteria(suffix="f")
    outcome = facade.run(SearchRequest("evm", criteria))
    assert outcome.is_found

    info = facade.describe(outcome.result)
    assert info["variant"] == "hex"
    assert info["address"] == outcome.result.address
    assert info["private_key"].startswith("0x")
    assert len(info["private_key"]) == 66
    assert info["mnemonic"] is None
    assert info["attempts"] == outcome.result.attempts
    assert matches(info["address"], criteria, HEX_FORMAT)


def test_describe_base58(facade):
    outcome = facade.run(SearchRequest("solana", SearchCriteria(prefix="a")))
    info = facade.describe(outcome.result)
    assert info["variant"] == "base58"
    assert len(info["public_key"]) == 64
    assert info["private_key"] not in info["address"]


def test_run_isolated(facade):
    outcome = facade.run_isolated(SearchRequest("hex", SearchCriteria(prefix="1")))
    assert outcome.kind is OutcomeKind.FOUND


def test_run_many_stops_at_first_miss(facade):
    found = facade.run_many(SearchRequest("hex", SearchCriteria(prefix="a")), count=2)
    assert len(found) == 2
    assert all(o.is_found for o in found)

    request = SearchRequest("base58", SearchCriteria(prefix="zzzzzzzzzz", case_sensitive=True),
                            budget=SearchBudget(max_attempts=5))
    missed = facade.run_many(request, count=3)
    assert len(missed) == 1
    assert missed[0].reason is NotFoundReason.ATTEMPTS_EXHAUSTED


def test_stop_when_idle_is_noop(facade):
    facade.stop()
    facade.stop()


def test_stop_cancels_in_process_search(facade):
    criteria = SearchCriteria(prefix="zzzzzzzzzz", case_sensitive=True)

    def stop_on_progress(event):
        facade.stop()

    request = SearchRequest("base58", criteria, progress=stop_on_progress, cadence=50)
    outcome = facade.run(request)
    assert outcome.reason is NotFoundReason.CANCELLED
    assert outcome.attempts == 51
