"""Public interface for the pocket_fx package."""

from __future__ import annotations

import time
from importlib import metadata as importlib_metadata
from typing import Callable

from pocket_fx.config import ExchangeSettings
from pocket_fx.ingestion.kursi_requests import KursiRequestsClient, RateFetchError
from pocket_fx.ingestion.models import BankRate, Currency, RateQuote, RateTable
from pocket_fx.ingestion.strategy import RateSource
from pocket_fx.rates.cache import RateSourceCache, RateSourceUnavailable
from pocket_fx.rates.converter import CurrencyConverter, RateResolution, RateTier
from pocket_fx.rates.fallback import FALLBACK_RATES, FallbackRateTable

__all__ = [
    "__version__",
    "BankRate",
    "Currency",
    "CurrencyConverter",
    "ExchangeSettings",
    "FALLBACK_RATES",
    "FallbackRateTable",
    "KursiRequestsClient",
    "PocketFx",
    "RateFetchError",
    "RateQuote",
    "RateResolution",
    "RateSource",
    "RateSourceCache",
    "RateSourceUnavailable",
    "RateTable",
    "RateTier",
]

try:
    __version__ = importlib_metadata.version("pocket-fx")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"


class PocketFx:
    """Composition root that wires the quote source, the cache and the converter.

    Each instance owns its own cache; share the instance, not module state,
    between the services that need conversions.
    """

    __slots__ = ("settings", "source", "cache", "converter")

    __version__ = __version__

    def __init__(
        self,
        settings: ExchangeSettings | None = None,
        *,
        source: RateSource | None = None,
        fallback: FallbackRateTable = FALLBACK_RATES,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Build the conversion stack.

        ``settings`` defaults to :meth:`ExchangeSettings.from_env`. Passing
        ``source`` replaces the kursi.ge client, which is mostly useful in
        tests and offline tooling.
        """

        self.settings = settings or ExchangeSettings.from_env()
        self.source: RateSource = source or KursiRequestsClient(
            url=self.settings.rates_url,
            timeout=self.settings.timeout,
        )
        self.cache = RateSourceCache(self.source, ttl=self.settings.ttl, clock=clock or time.time)
        self.converter = CurrencyConverter(
            self.cache,
            fallback=fallback,
            intermediates=self.settings.intermediates,
        )

    def rate(self, from_currency: Currency | str, to_currency: Currency | str) -> float:
        return self.converter.rate(from_currency, to_currency)

    def convert(
        self,
        amount: float,
        from_currency: Currency | str,
        to_currency: Currency | str,
    ) -> float:
        return self.converter.convert(amount, from_currency, to_currency)

    def resolve(
        self, from_currency: Currency | str, to_currency: Currency | str
    ) -> RateResolution:
        return self.converter.resolve(from_currency, to_currency)

    def clear_cache(self) -> None:
        self.cache.clear()

    def cache_age(self) -> float | None:
        """Seconds since the last successful fetch, ``None`` before the first one."""

        return self.cache.age()

    def close(self) -> None:
        closer = getattr(self.source, "close", None)
        if callable(closer):
            closer()
