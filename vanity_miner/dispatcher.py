"""
Process-isolated search.

A WorkerDispatcher runs one SearchController in a child process and relays
progress and the terminal outcome back over a multiprocessing queue.

IMPORTANT: worker targets must stay top-level importable functions so they
work with the 'spawn' start method (macOS/Windows).
"""

import logging
import multiprocessing
import queue
import signal
import threading
import time
from typing import Callable, Optional, Union

from . import config
from .controller import SearchController, emit_progress, validate_options
from .errors import BusyError, ErrorKind, ValidationError, WorkerCrashed
from .keygen import GENERATORS, KeyGenerator, create_generator, resolve_variant
from .models import (
    NotFoundReason, SearchBudget, SearchCriteria, SearchOptions, SearchOutcome, Variant,
)

logger = logging.getLogger(__name__)

MSG_PROGRESS = "progress"
MSG_FOUND = "found"
MSG_NOT_FOUND = "not_found"
MSG_ERROR = "error"


class _ProgressRelay:
    """Progress sink that forwards events over the message queue."""

    def __init__(self, messages):
        self.messages = messages

    def put(self, event):
        self.messages.put((MSG_PROGRESS, event))


def search_worker(variant: str, criteria: SearchCriteria, budget: SearchBudget,
                  cadence: int, use_mnemonic: bool,
                  generator_factory: Optional[Callable[[], KeyGenerator]],
                  messages, stop_event) -> None:
    # The parent owns interruption
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    if hasattr(signal, 'SIGTERM'):
        signal.signal(signal.SIGTERM, signal.SIG_DFL)

    if generator_factory is not None:
        generator = generator_factory()
    else:
        generator = create_generator(variant, use_mnemonic=use_mnemonic)

    controller = SearchController(generator, cancel_event=stop_event)
    options = SearchOptions(criteria=criteria, budget=budget,
                            progress=_ProgressRelay(messages), cadence=cadence)
    outcome = controller.run(options)

    if outcome.is_found:
        messages.put((MSG_FOUND, outcome.result))
    elif outcome.reason is not None:
        messages.put((MSG_NOT_FOUND, (outcome.reason, outcome.attempts, outcome.elapsed_ms)))
    else:
        messages.put((MSG_ERROR, (outcome.error, outcome.message,
                                  outcome.attempts, outcome.elapsed_ms)))


def _to_outcome(kind: str, payload) -> SearchOutcome:
    if kind == MSG_FOUND:
        return SearchOutcome.found(payload)
    if kind == MSG_NOT_FOUND:
        reason, attempts, elapsed_ms = payload
        return SearchOutcome.not_found(reason, attempts, elapsed_ms)
    error, message, attempts, elapsed_ms = payload
    return SearchOutcome.failed(error, message, attempts, elapsed_ms)


class WorkerDispatcher:
    """Runs at most one isolated search at a time.

    ``start()`` is non-blocking; ``wait()`` pumps worker messages, relays
    progress to ``options.progress`` and returns the terminal outcome.
    ``stop()`` may be called from any thread (or a signal handler).
    """

    def __init__(self, variant: Union[str, Variant] = Variant.BASE58,
                 use_mnemonic: bool = False,
                 generator_factory: Optional[Callable[[], KeyGenerator]] = None,
                 mp_context=None,
                 join_timeout: float = config.WORKER_JOIN_TIMEOUT,
                 poll_interval: float = config.WORKER_POLL_INTERVAL):
        self.variant = resolve_variant(variant)
        self.use_mnemonic = use_mnemonic
        self.generator_factory = generator_factory
        self._ctx = mp_context or multiprocessing.get_context()
        self._join_timeout = join_timeout
        self._poll_interval = poll_interval
        self._lock = threading.RLock()
        self._process = None
        self._messages = None
        self._stop_event = None
        self._options: Optional[SearchOptions] = None
        self._resolved: Optional[SearchOutcome] = None
        self._last_attempts = 0
        self._last_elapsed_ms = 0

    @property
    def address_format(self):
        factory_format = getattr(self.generator_factory, "address_format", None)
        return factory_format or GENERATORS[self.variant].address_format

    @property
    def running(self) -> bool:
        with self._lock:
            return self._process is not None

    def start(self, options: SearchOptions) -> None:
        with self._lock:
            if self._process is not None:
                raise BusyError("A search is already running on this dispatcher")

            issues = validate_options(options, self.address_format)
            if issues:
                raise ValidationError(issues)

            messages = self._ctx.Queue()
            stop_event = self._ctx.Event()
            process = self._ctx.Process(
                target=search_worker,
                args=(self.variant.value, options.criteria, options.budget, options.cadence,
                      self.use_mnemonic, self.generator_factory, messages, stop_event),
                daemon=True,
            )
            process.start()

            self._process = process
            self._messages = messages
            self._stop_event = stop_event
            self._options = options
            self._resolved = None
            self._last_attempts = 0
            self._last_elapsed_ms = 0
            logger.debug("Started worker pid=%s for %s search", process.pid, self.variant.value)

    def run(self, options: SearchOptions) -> SearchOutcome:
        self.start(options)
        return self.wait()

    def wait(self, timeout: Optional[float] = None) -> Optional[SearchOutcome]:
        """Block until the search terminates.

        Returns None if ``timeout`` seconds pass first; the search keeps running.
        """
        with self._lock:
            if self._process is None:
                if self._resolved is not None:
                    outcome, self._resolved = self._resolved, None
                    return outcome
                raise RuntimeError("No search has been started")
            process, messages, options = self._process, self._messages, self._options

        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            with self._lock:
                if self._process is not process:
                    outcome, self._resolved = self._resolved, None
                    return outcome

            try:
                kind, payload = messages.get(timeout=self._poll_interval)
            except queue.Empty:
                if not process.is_alive():
                    return self._deliver(process, self._drain_after_exit(process, messages, options))
                if deadline is not None and time.monotonic() >= deadline:
                    return None
                continue
            except (OSError, ValueError, EOFError):
                # Queue closed underneath us, normally by stop()
                with self._lock:
                    if self._process is not process:
                        continue
                return self._deliver(process, self._crashed(process))

            if kind == MSG_PROGRESS:
                self._relay(options, payload)
                continue
            return self._deliver(process, _to_outcome(kind, payload))

    def stop(self) -> None:
        """Cancel the running search. Idempotent."""
        with self._lock:
            if self._process is None:
                return
            logger.info("Stopping worker pid=%s", self._process.pid)
            self._resolved = SearchOutcome.not_found(
                NotFoundReason.CANCELLED, self._last_attempts, self._last_elapsed_ms)
            self._teardown(grace=0.2)

    def _relay(self, options: SearchOptions, event) -> None:
        self._last_attempts = event.attempts
        self._last_elapsed_ms = event.elapsed_ms
        emit_progress(options.progress, event)

    def _drain_after_exit(self, process, messages, options) -> SearchOutcome:
        # The worker flushes its queue before exiting; give the pipe a moment
        while True:
            try:
                kind, payload = messages.get(timeout=0.5)
            except (queue.Empty, OSError, ValueError, EOFError):
                return self._crashed(process)
            if kind == MSG_PROGRESS:
                self._relay(options, payload)
                continue
            return _to_outcome(kind, payload)

    def _crashed(self, process) -> SearchOutcome:
        try:
            process.join(timeout=self._join_timeout)
            exitcode = process.exitcode
        except ValueError:
            # Already closed by a concurrent stop()
            exitcode = None
        error = WorkerCrashed(exitcode)
        logger.error("%s", error)
        return SearchOutcome.failed(ErrorKind.WORKER_CRASHED, str(error),
                                    self._last_attempts, self._last_elapsed_ms)

    def _deliver(self, process, outcome: SearchOutcome) -> SearchOutcome:
        with self._lock:
            if self._process is not process:
                # stop() won the race
                resolved, self._resolved = self._resolved, None
                return resolved or outcome
            self._teardown(grace=self._join_timeout)
            # A signal-handler stop() may have run inside the teardown
            self._resolved = None
        return outcome

    def _teardown(self, grace: float) -> None:
        process, messages, stop_event = self._process, self._messages, self._stop_event
        if process is None:
            return
        self._process = self._messages = self._stop_event = None

        try:
            stop_event.set()
        except OSError:
            pass

        process.join(timeout=grace)
        if process.is_alive():
            process.terminate()
            process.join(timeout=self._join_timeout)
        if process.is_alive():
            process.kill()
            process.join(timeout=1)

        messages.close()
        messages.cancel_join_thread()
        if not process.is_alive():
            process.close()
        logger.debug("Worker torn down")
