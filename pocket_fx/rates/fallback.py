"""Hand-maintained rates used when the live source cannot answer."""

from __future__ import annotations

from types import MappingProxyType
from typing import Final, Mapping

from pocket_fx.ingestion.models import Currency

FallbackRateTable = Mapping[Currency, Mapping[Currency, float]]

FALLBACK_RATES: Final[FallbackRateTable] = MappingProxyType(
    {
        Currency.USD: MappingProxyType({Currency.GEO: 2.7}),
        Currency.GEO: MappingProxyType({Currency.USD: 0.37}),
    }
)


def freeze_rates(rates: Mapping[Currency, Mapping[Currency, float]]) -> FallbackRateTable:
    """Return a read-only copy of a nested ``base -> secondary -> rate`` mapping."""

    return MappingProxyType(
        {
            Currency.coerce(base): MappingProxyType(
                {Currency.coerce(secondary): float(rate) for secondary, rate in row.items()}
            )
            for base, row in rates.items()
        }
    )


__all__ = ["FALLBACK_RATES", "FallbackRateTable", "freeze_rates"]
