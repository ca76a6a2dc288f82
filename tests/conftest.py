import pytest

from vanity_miner.models import SearchBudget, SearchCriteria, SearchOptions

# Case-sensitive, long and unlikely: effectively never matches
IMPOSSIBLE = SearchCriteria(prefix="zzzzzzzzzzzz", case_sensitive=True)


@pytest.fixture
def impossible_options():
    def make(max_attempts=10_000_000, max_duration_ms=60_000, cadence=100, progress=None):
        return SearchOptions(criteria=IMPOSSIBLE,
                             budget=SearchBudget(max_attempts, max_duration_ms),
                             progress=progress, cadence=cadence)
    return make
