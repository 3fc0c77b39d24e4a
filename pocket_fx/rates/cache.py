"""Time-boxed cache in front of the remote quote source."""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future
from typing import Callable

from pocket_fx.ingestion.models import RateTable
from pocket_fx.ingestion.strategy import RateSource
from pocket_fx.utils.logger import get_logger

LOGGER = get_logger(__name__)
DEFAULT_TTL_SECONDS = 3600.0


class RateSourceUnavailable(RuntimeError):
    """The source failed and there is no cached table of any age to fall back on."""


class RateSourceCache:
    """Own the single table slot and refresh it from ``source`` once it is stale.

    Availability wins over freshness: once any fetch has succeeded, a failing
    source only produces warnings and the last good table keeps being served.
    Concurrent callers that find the table stale share one in-flight fetch.
    """

    def __init__(
        self,
        source: RateSource,
        *,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be a positive number of seconds")
        self._source = source
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._table: RateTable | None = None
        self._inflight: Future[RateTable] | None = None

    @property
    def ttl(self) -> float:
        return self._ttl

    def get_table(self) -> RateTable:
        """Return the freshest table available, fetching when stale or empty."""

        with self._lock:
            table = self._table
            if table is not None and not self._is_stale(table):
                age = self._clock() - table.fetched_at
                LOGGER.debug("Returning cached rates (age: %.0fs)", age)
                return table
            pending = self._inflight
            if pending is None:
                pending = self._inflight = Future()
                owner = True
            else:
                owner = False

        if not owner:
            LOGGER.debug("Waiting for in-flight rate fetch")
            return pending.result()
        return self._refresh(pending)

    def peek(self) -> RateTable | None:
        """Return the cached table, fresh or not, without touching the source."""

        with self._lock:
            return self._table

    def age(self) -> float | None:
        """Seconds since the cached table was fetched, or ``None`` if empty."""

        table = self.peek()
        if table is None:
            return None
        return max(0.0, self._clock() - table.fetched_at)

    def clear(self) -> None:
        """Drop the cached table so the next read goes to the source."""

        with self._lock:
            self._table = None
        LOGGER.info("Exchange rates cache cleared")

    def _is_stale(self, table: RateTable) -> bool:
        return self._clock() - table.fetched_at >= self._ttl

    def _refresh(self, pending: Future[RateTable]) -> RateTable:
        started_at = self._clock()
        outcome: RateTable | None = None
        failure: BaseException | None = None
        try:
            try:
                fresh = RateTable(self._source.fetch(), fetched_at=started_at)
            except Exception as exc:
                outcome = self._serve_stale(exc)
            else:
                outcome = self._store(fresh)
        except BaseException as exc:
            failure = exc
            raise
        finally:
            with self._lock:
                if self._inflight is pending:
                    self._inflight = None
            if failure is not None:
                pending.set_exception(failure)
            else:
                pending.set_result(outcome)
        return outcome

    def _serve_stale(self, exc: Exception) -> RateTable:
        LOGGER.error("Failed to fetch exchange rates: %s", exc)
        stale = self.peek()
        if stale is None:
            raise RateSourceUnavailable(
                "Unable to fetch exchange rates and no cached table is available"
            ) from exc
        LOGGER.warning(
            "Using stale exchange rates fetched %.0fs ago due to source error",
            self._clock() - stale.fetched_at,
        )
        return stale

    def _store(self, fresh: RateTable) -> RateTable:
        with self._lock:
            current = self._table
            if current is None or current.fetched_at <= fresh.fetched_at:
                self._table = current = fresh
        LOGGER.info("Cached %s exchange rates", len(fresh))
        return current


__all__ = ["DEFAULT_TTL_SECONDS", "RateSourceCache", "RateSourceUnavailable"]
