"""
Search controller: drives the generate -> match loop under attempt and
wall-clock budgets, with cooperative cancellation and periodic progress.

A controller is single-use: IDLE -> RUNNING -> one terminal state.
"""

import logging
import threading
import time
from enum import Enum
from typing import Callable, List, Optional

from .errors import ErrorKind, GenerationError, ValidationError
from .keygen import KeyGenerator
from .matcher import PatternMatcher, validate_criteria
from .models import (
    AddressFormat, NotFoundReason, ProgressEvent, SearchOptions, SearchOutcome, SearchResult,
)

logger = logging.getLogger(__name__)


class SearchState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    FOUND = "found"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"
    FAILED = "failed"


def validate_options(options: SearchOptions, address_format: AddressFormat) -> List[str]:
    issues = validate_criteria(options.criteria, address_format)
    budget = options.budget
    if not isinstance(budget.max_attempts, int) or budget.max_attempts < 1:
        issues.append("Max attempts must be a positive integer")
    if not isinstance(budget.max_duration_ms, int) or budget.max_duration_ms < 1:
        issues.append("Max duration must be a positive number of milliseconds")
    if not isinstance(options.cadence, int) or options.cadence < 1:
        issues.append("Progress cadence must be a positive integer")
    return issues


def emit_progress(sink, event: ProgressEvent) -> None:
    """Deliver a progress event to a queue-like sink or a callable."""
    if sink is None:
        return
    try:
        if hasattr(sink, "put"):
            sink.put(event)
        else:
            sink(event)
    except Exception as e:
        logger.warning("Progress sink rejected event at %d attempts: %s", event.attempts, e)


class SearchController:
    """Runs one search with a KeyGenerator + PatternMatcher pair.

    ``cancel_event`` may be any object with ``is_set()``/``set()``, e.g. a
    ``multiprocessing.Event`` owned by a dispatcher.
    """

    def __init__(self, generator: KeyGenerator, matcher: Optional[PatternMatcher] = None,
                 cancel_event=None, clock: Callable[[], float] = time.monotonic):
        self.generator = generator
        self.matcher = matcher or PatternMatcher(generator.address_format)
        self._cancel = cancel_event if cancel_event is not None else threading.Event()
        self._clock = clock
        self._state = SearchState.IDLE
        self._start_time = 0.0
        self.attempts = 0

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def elapsed_ms(self) -> int:
        if self._state is SearchState.IDLE:
            return 0
        return int((self._clock() - self._start_time) * 1000)

    def cancel(self) -> None:
        """Request cancellation. Observed at the next check point."""
        self._cancel.set()

    def run(self, options: SearchOptions) -> SearchOutcome:
        if self._state is not SearchState.IDLE:
            raise RuntimeError(f"SearchController is single-use (state: {self._state.value})")

        issues = validate_options(options, self.generator.address_format)
        if issues:
            raise ValidationError(issues)

        criteria = options.criteria
        max_attempts = options.budget.max_attempts
        max_duration = options.budget.max_duration_ms / 1000
        cadence = options.cadence
        generate = self.generator.generate
        matches = self.matcher.matches
        clock = self._clock

        self._state = SearchState.RUNNING
        self._start_time = start = clock()
        attempts = 0
        logger.debug("Search started: variant=%s max_attempts=%d max_duration_ms=%d",
                     self.generator.variant.value, max_attempts, options.budget.max_duration_ms)

        while True:
            try:
                record = generate()
            except GenerationError as e:
                return self._fail(str(e), attempts)

            attempts += 1
            self.attempts = attempts

            if matches(record.public_identifier, criteria):
                if not self.generator.verify(record):
                    return self._fail("Derived keypair failed re-verification", attempts)
                self._state = SearchState.FOUND
                result = SearchResult(record=record, attempts=attempts,
                                      elapsed_ms=int((clock() - start) * 1000))
                logger.info("Match found after %d attempts (%d ms)", attempts, result.elapsed_ms)
                logger.debug("Matched address: %s", record.public_identifier)
                return SearchOutcome.found(result)
            record = None

            if self._cancel.is_set():
                return self._finish(SearchState.CANCELLED, NotFoundReason.CANCELLED, attempts)
            if attempts >= max_attempts:
                return self._finish(SearchState.EXHAUSTED, NotFoundReason.ATTEMPTS_EXHAUSTED, attempts)
            elapsed = clock() - start
            if elapsed >= max_duration:
                return self._finish(SearchState.EXHAUSTED, NotFoundReason.TIME_EXHAUSTED, attempts)

            if attempts % cadence == 0:
                emit_progress(options.progress, ProgressEvent(attempts, int(elapsed * 1000)))
                time.sleep(0)

    def _finish(self, state: SearchState, reason: NotFoundReason, attempts: int) -> SearchOutcome:
        self._state = state
        elapsed_ms = self.elapsed_ms
        logger.info("Search ended without match: %s after %d attempts (%d ms)",
                    reason.value, attempts, elapsed_ms)
        return SearchOutcome.not_found(reason, attempts, elapsed_ms)

    def _fail(self, message: str, attempts: int) -> SearchOutcome:
        self._state = SearchState.FAILED
        elapsed_ms = self.elapsed_ms
        logger.error("Search aborted after %d attempts: %s", attempts, message)
        return SearchOutcome.failed(ErrorKind.GENERATION, message, attempts, elapsed_ms)
