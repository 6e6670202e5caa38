"""
Emitter

Buffers tracked events and delivers them to a single collector endpoint.

Events are appended to an in-memory FIFO queue by the writer thread and drained
by a single background worker. ``flush()`` never blocks the caller: it hands the
drain to the worker and returns a Future. A batch that fails to deliver is put
back at the head of the queue and retried with exponential backoff; after
``max_attempts`` it is dropped and reported through ``on_failure`` and the log.
"""

import logging
import threading
import time
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Deque, List, Optional

import requests

from .errors import ConfigurationError, DeliveryError
from .models.payload import TrackedEvent, build_batch_payload

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[int], None]
FailureCallback = Callable[[DeliveryError], None]


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_settings(batch_size, max_attempts, retry_delay, backoff_factor, request_timeout) -> None:
    if batch_size is not None and (not _is_int(batch_size) or batch_size < 1):
        raise ConfigurationError(f"batch_size must be a positive integer or None, got {batch_size!r}")
    if not _is_int(max_attempts) or max_attempts < 1:
        raise ConfigurationError(f"max_attempts must be an integer of at least 1, got {max_attempts!r}")
    if not _is_number(retry_delay) or retry_delay < 0:
        raise ConfigurationError(f"retry_delay must be a non-negative number, got {retry_delay!r}")
    if not _is_number(backoff_factor) or backoff_factor < 1:
        raise ConfigurationError(f"backoff_factor must be a number of at least 1, got {backoff_factor!r}")
    if not _is_number(request_timeout) or request_timeout <= 0:
        raise ConfigurationError(f"request_timeout must be a positive number, got {request_timeout!r}")


class Emitter:
    """Queue plus background delivery to the collector."""

    def __init__(
        self,
        endpoint: str,
        batch_size: Optional[int] = None,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        backoff_factor: float = 2.0,
        request_timeout: float = 5.0,
        session: Optional[requests.Session] = None,
        on_success: Optional[SuccessCallback] = None,
        on_failure: Optional[FailureCallback] = None,
    ):
        """Initialize the emitter.

        Args:
            endpoint: Collector URL; batches are POSTed here
            batch_size: Events per request; None sends everything pending at once
            max_attempts: Delivery attempts per batch before it is dropped
            retry_delay: Delay in seconds before the first retry
            backoff_factor: Multiplier applied to the delay after each failed attempt
            request_timeout: Timeout in seconds for each POST
            session: Optional requests session (a new one is built if omitted)
            on_success: Called with the number of events in each delivered batch
            on_failure: Called with a DeliveryError for each dropped batch

        Raises:
            ConfigurationError: If a delivery setting is out of range
        """
        _check_settings(batch_size, max_attempts, retry_delay, backoff_factor, request_timeout)

        self.endpoint = endpoint
        self.batch_size = batch_size
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.backoff_factor = backoff_factor
        self.request_timeout = request_timeout
        self.on_success = on_success
        self.on_failure = on_failure

        self.session = session if session is not None else requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json; charset=utf-8",
        })

        self._queue: Deque[TrackedEvent] = deque()
        self._lock = threading.Lock()
        # One worker keeps deliveries in enqueue order across flushes
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="surfside-emitter")
        self._closed = False
        self._sent_count = 0
        self._dropped_count = 0

    # ------------------------------------------------------------------
    # Queue
    # ------------------------------------------------------------------

    def enqueue(self, event: TrackedEvent) -> None:
        """Append *event* to the queue."""
        with self._lock:
            self._queue.append(event)

    def pending(self) -> List[TrackedEvent]:
        """Snapshot of queued events in delivery order."""
        with self._lock:
            return list(self._queue)

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._queue)

    @property
    def sent_count(self) -> int:
        return self._sent_count

    @property
    def dropped_count(self) -> int:
        return self._dropped_count

    def _take_batch(self, limit: Optional[int] = None) -> List[TrackedEvent]:
        limit = limit or self.batch_size
        with self._lock:
            size = len(self._queue) if limit is None else min(limit, len(self._queue))
            return [self._queue.popleft() for _ in range(size)]

    def _requeue(self, batch: List[TrackedEvent]) -> None:
        with self._lock:
            self._queue.extendleft(reversed(batch))

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def flush(self) -> Optional[Future]:
        """Trigger delivery of everything pending.

        Returns:
            A Future resolving to the number of events delivered, or None if the
            queue was empty and no delivery was scheduled.
        """
        if self._closed:
            logger.warning("Flush requested on a closed emitter, ignoring")
            return None
        if self.pending_count == 0:
            logger.debug("Flush requested with an empty queue, nothing to send")
            return None
        return self._executor.submit(self._drain)

    def flush_sync(self, timeout: Optional[float] = None) -> int:
        """Flush and wait for the drain to finish."""
        future = self.flush()
        if future is None:
            return 0
        return future.result(timeout=timeout)

    def _drain(self) -> int:
        delivered = 0
        retry_size = None
        while True:
            # A requeued batch sits at the head; take exactly it again
            batch = self._take_batch(retry_size)
            retry_size = None
            if not batch:
                return delivered

            attempt = max(e.attempts for e in batch) + 1
            for e in batch:
                e.attempts = attempt

            try:
                self._send(batch)
            except DeliveryError as error:
                if attempt >= self.max_attempts:
                    error.attempts = attempt
                    self._drop(batch, error)
                    continue
                delay = self.retry_delay * (self.backoff_factor ** (attempt - 1))
                logger.warning(
                    f"Delivery attempt {attempt}/{self.max_attempts} failed for "
                    f"{len(batch)} event(s): {error}, retrying in {delay:.1f}s"
                )
                self._requeue(batch)
                retry_size = len(batch)
                time.sleep(delay)
                continue

            delivered += len(batch)
            self._sent_count += len(batch)
            logger.info(f"Delivered {len(batch)} event(s) to {self.endpoint}")
            self._notify(self.on_success, len(batch))

    def _send(self, batch: List[TrackedEvent]) -> None:
        event_ids = [e.event_id for e in batch]
        body = build_batch_payload(batch)
        try:
            response = self.session.post(self.endpoint, json=body, timeout=self.request_timeout)
        except requests.RequestException as e:
            raise DeliveryError(f"Request to {self.endpoint} failed: {e}", event_ids=event_ids) from e

        if not 200 <= response.status_code < 300:
            raise DeliveryError(
                f"Collector responded with HTTP {response.status_code}",
                event_ids=event_ids,
                status_code=response.status_code,
            )

    def _drop(self, batch: List[TrackedEvent], error: DeliveryError) -> None:
        self._dropped_count += len(batch)
        logger.error(
            f"Dropping {len(batch)} event(s) after {error.attempts} attempt(s): {error}"
        )
        self._notify(self.on_failure, error)

    def _notify(self, callback, argument) -> None:
        if callback is None:
            return
        try:
            callback(argument)
        except Exception as e:
            logger.error(f"Emitter callback {callback!r} raised: {e}", exc_info=True)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting flushes and release the worker thread."""
        self._closed = True
        self._executor.shutdown(wait=wait)
        self.session.close()
