"""Currency conversion with a fixed degradation ladder.

A rate is resolved by trying, in order: identity, the live table (direct,
inverse, bridged through an intermediate currency), the static fallback table
(direct, inverse, bridged) and finally ``1``. Every tier is a plain function
returning ``float | None`` and :func:`first_success` picks the first answer.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Sequence

from pocket_fx.ingestion.models import Currency, RateTable
from pocket_fx.rates.cache import RateSourceCache
from pocket_fx.rates.fallback import FALLBACK_RATES, FallbackRateTable
from pocket_fx.utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_INTERMEDIATES: tuple[Currency, ...] = (Currency.USD, Currency.GEO, Currency.EUR)

Lookup = Callable[[Currency, Currency], "float | None"]
Tier = tuple["RateTier", Callable[[], "float | None"]]


class RateTier(str, Enum):
    """Where a resolved rate came from."""

    IDENTITY = "identity"
    LIVE_DIRECT = "live_direct"
    LIVE_INVERSE = "live_inverse"
    LIVE_BRIDGE = "live_bridge"
    FALLBACK_DIRECT = "fallback_direct"
    FALLBACK_INVERSE = "fallback_inverse"
    FALLBACK_BRIDGE = "fallback_bridge"
    LAST_RESORT = "last_resort"

    @property
    def is_live(self) -> bool:
        return self.value.startswith("live_")


@dataclass(frozen=True, slots=True)
class RateResolution:
    rate: float
    tier: RateTier

    @property
    def is_last_resort(self) -> bool:
        return self.tier is RateTier.LAST_RESORT


def _usable(rate: float | None) -> float | None:
    if rate is None or not math.isfinite(rate) or rate <= 0:
        return None
    return rate


def direct_rate(lookup: Lookup, base: Currency, secondary: Currency) -> float | None:
    return _usable(lookup(base, secondary))


def inverse_rate(lookup: Lookup, base: Currency, secondary: Currency) -> float | None:
    quoted = _usable(lookup(secondary, base))
    if quoted is None:
        return None
    return _usable(1 / quoted)


def direct_or_inverse_rate(lookup: Lookup, base: Currency, secondary: Currency) -> float | None:
    rate = direct_rate(lookup, base, secondary)
    if rate is not None:
        return rate
    return inverse_rate(lookup, base, secondary)


def bridged_rate(
    lookup: Lookup,
    base: Currency,
    secondary: Currency,
    intermediates: Sequence[Currency],
) -> float | None:
    """Compose ``base -> X -> secondary`` through the first intermediate that works.

    Intermediates are tried in the given order and the search stops at the
    first one where both legs resolve; it does not look for a better path.
    """

    for intermediate in intermediates:
        if intermediate in (base, secondary):
            continue
        first_leg = direct_or_inverse_rate(lookup, base, intermediate)
        if first_leg is None:
            continue
        second_leg = direct_or_inverse_rate(lookup, intermediate, secondary)
        if second_leg is None:
            continue
        rate = _usable(first_leg * second_leg)
        if rate is not None:
            LOGGER.debug(
                "Found cross rate %s -> %s via %s: %s",
                base.value,
                secondary.value,
                intermediate.value,
                rate,
            )
            return rate
    return None


def first_success(tiers: Iterable[Tier]) -> RateResolution | None:
    """Run ``tiers`` in order and return the first one that produced a rate."""

    for tier, attempt in tiers:
        try:
            rate = attempt()
        except Exception as exc:
            LOGGER.debug("Tier %s failed, trying the next one: %s", tier.value, exc)
            continue
        if rate is not None:
            return RateResolution(rate=rate, tier=tier)
        LOGGER.debug("No rate from tier %s", tier.value)
    return None


def _no_rate(_base: Currency, _secondary: Currency) -> float | None:
    return None


class CurrencyConverter:
    """Turn currency pairs into rates and amounts into converted amounts.

    Holds no mutable state of its own; the cache is the only shared resource.
    """

    __slots__ = ("_cache", "_fallback", "_intermediates")

    def __init__(
        self,
        cache: RateSourceCache,
        *,
        fallback: FallbackRateTable = FALLBACK_RATES,
        intermediates: Sequence[Currency] = DEFAULT_INTERMEDIATES,
    ) -> None:
        self._cache = cache
        self._fallback = fallback
        self._intermediates = tuple(intermediates)

    @property
    def intermediates(self) -> tuple[Currency, ...]:
        return self._intermediates

    def rate(self, from_currency: Currency | str, to_currency: Currency | str) -> float:
        """Return how many ``to_currency`` units one ``from_currency`` unit is worth."""

        return self.resolve(from_currency, to_currency).rate

    def convert(
        self,
        amount: float,
        from_currency: Currency | str,
        to_currency: Currency | str,
    ) -> float:
        return amount * self.rate(from_currency, to_currency)

    def resolve(
        self, from_currency: Currency | str, to_currency: Currency | str
    ) -> RateResolution:
        """Resolve a rate and report which tier of the ladder produced it."""

        base = Currency.coerce(from_currency)
        secondary = Currency.coerce(to_currency)
        if base is secondary:
            return RateResolution(rate=1.0, tier=RateTier.IDENTITY)

        table = self._live_table()
        live: Lookup = table.buy_rate if table is not None else _no_rate
        fallback: Lookup = self._fallback_rate

        resolution = first_success(
            [
                (RateTier.LIVE_DIRECT, lambda: direct_rate(live, base, secondary)),
                (RateTier.LIVE_INVERSE, lambda: inverse_rate(live, base, secondary)),
                (
                    RateTier.LIVE_BRIDGE,
                    lambda: bridged_rate(live, base, secondary, self._intermediates),
                ),
                (RateTier.FALLBACK_DIRECT, lambda: direct_rate(fallback, base, secondary)),
                (RateTier.FALLBACK_INVERSE, lambda: inverse_rate(fallback, base, secondary)),
                (
                    RateTier.FALLBACK_BRIDGE,
                    lambda: bridged_rate(fallback, base, secondary, self._intermediates),
                ),
            ]
        )
        if resolution is None:
            LOGGER.warning(
                "No exchange rate found for %s to %s; using 1 as last resort",
                base.value,
                secondary.value,
            )
            return RateResolution(rate=1.0, tier=RateTier.LAST_RESORT)
        if not resolution.tier.is_live:
            LOGGER.info(
                "Using %s rate for %s to %s: %s",
                resolution.tier.value,
                base.value,
                secondary.value,
                resolution.rate,
            )
        return resolution

    def _live_table(self) -> RateTable | None:
        try:
            return self._cache.get_table()
        except Exception as exc:
            LOGGER.debug("Live rates unavailable, continuing with fallback rates: %s", exc)
            return None

    def _fallback_rate(self, base: Currency, secondary: Currency) -> float | None:
        return self._fallback.get(base, {}).get(secondary)


__all__ = [
    "CurrencyConverter",
    "DEFAULT_INTERMEDIATES",
    "RateResolution",
    "RateTier",
    "bridged_rate",
    "direct_or_inverse_rate",
    "direct_rate",
    "first_success",
    "inverse_rate",
]
