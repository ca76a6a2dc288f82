"""Single entry point routing requests to the right generator and controller."""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from . import config
from .controller import SearchController
from .dispatcher import WorkerDispatcher
from .estimator import (
    estimate_expected_attempts, estimate_expected_duration, estimate_probability,
)
from .keygen import GENERATORS, KeyGenerator, create_generator, resolve_variant
from .matcher import validate_criteria
from .models import SearchBudget, SearchCriteria, SearchOptions, SearchOutcome, SearchResult, Variant

logger = logging.getLogger(__name__)


@dataclass
class SearchRequest:
    variant: Union[str, Variant]
    criteria: SearchCriteria
    budget: SearchBudget = field(default_factory=SearchBudget)
    progress: Optional[Any] = None
    use_mnemonic: bool = False
    cadence: int = config.PROGRESS_CADENCE

    def options(self) -> SearchOptions:
        return SearchOptions(criteria=self.criteria, budget=self.budget,
                             progress=self.progress, cadence=self.cadence)


class VanityFacade:
    """Uniform estimate/validate/run operations across address variants."""

    def __init__(self, mp_context=None):
        self._mp_context = mp_context
        self._lock = threading.Lock()
        self._controller: Optional[SearchController] = None
        self._dispatcher: Optional[WorkerDispatcher] = None

    @staticmethod
    def _format(variant):
        return GENERATORS[resolve_variant(variant)].address_format

    def validate(self, variant, criteria: SearchCriteria) -> List[str]:
        return validate_criteria(criteria, self._format(variant))

    def estimate_probability(self, variant, criteria: SearchCriteria) -> float:
        return estimate_probability(criteria, self._format(variant))

    def estimate_expected_attempts(self, variant, criteria: SearchCriteria):
        return estimate_expected_attempts(criteria, self._format(variant))

    def estimate_expected_duration(self, variant, criteria: SearchCriteria,
                                   use_mnemonic: bool = False):
        generator = create_generator(variant, use_mnemonic=use_mnemonic)
        return estimate_expected_duration(criteria, generator.address_format,
                                          generator.throughput_per_second)

    def create_generator(self, request: SearchRequest) -> KeyGenerator:
        return create_generator(request.variant, use_mnemonic=request.use_mnemonic)

    def run(self, request: SearchRequest) -> SearchOutcome:
        """Search in the calling thread."""
        controller = SearchController(self.create_generator(request))
        with self._lock:
            self._controller = controller
        try:
            return controller.run(request.options())
        finally:
            with self._lock:
                if self._controller is controller:
                    self._controller = None

    def run_isolated(self, request: SearchRequest) -> SearchOutcome:
        """Search in a worker process; the caller's thread only relays progress."""
        dispatcher = WorkerDispatcher(request.variant, use_mnemonic=request.use_mnemonic,
                                      mp_context=self._mp_context)
        with self._lock:
            self._dispatcher = dispatcher
        try:
            return dispatcher.run(request.options())
        finally:
            with self._lock:
                if self._dispatcher is dispatcher:
                    self._dispatcher = None

    def run_many(self, request: SearchRequest, count: int,
                 isolated: bool = False) -> List[SearchOutcome]:
        """Run up to ``count`` searches, stopping at the first one that does not find a match."""
        outcomes = []
        for _ in range(count):
            outcome = self.run_isolated(request) if isolated else self.run(request)
            outcomes.append(outcome)
            if not outcome.is_found:
                break
        return outcomes

    def stop(self) -> None:
        """Cancel whatever search is in flight. Safe to call at any time."""
        with self._lock:
            controller, dispatcher = self._controller, self._dispatcher
        if controller is not None:
            controller.cancel()
        if dispatcher is not None:
            dispatcher.stop()

    def describe(self, result: SearchResult) -> Dict[str, Any]:
        """Normalized, display-ready view of a result."""
        record = result.record
        generator = GENERATORS[record.variant]()
        return {
            "variant": record.variant.value,
            "address": record.public_identifier,
            "public_key": record.public_key.hex(),
            "private_key": generator.encode_private(record),
            "mnemonic": record.mnemonic,
            "attempts": result.attempts,
            "elapsed_ms": result.elapsed_ms,
        }
