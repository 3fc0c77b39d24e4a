"""Value types shared by the rate source, the cache and the converter."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping


class Currency(str, Enum):
    """Currencies money amounts can be stored or displayed in."""

    USD = "USD"
    EUR = "EUR"
    GEO = "GEO"

    @classmethod
    def coerce(cls, value: "Currency | str") -> "Currency":
        """Accept an enum member or a case-insensitive currency code."""

        if isinstance(value, cls):
            return value
        code = str(value).strip().upper()
        try:
            return cls(code)
        except ValueError:
            supported = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Unsupported currency {value!r}. Supported values are {supported}."
            ) from None


@dataclass(frozen=True, slots=True)
class BankRate:
    buy_rate: float
    sell_rate: float


@dataclass(frozen=True, slots=True)
class RateQuote:
    """One directed quote: a unit of ``base`` buys ``buy_rate`` of ``secondary``."""

    base: Currency
    secondary: Currency
    buy_rate: float
    sell_rate: float
    bank_rates: Mapping[str, BankRate] = field(default_factory=dict)
    name: str | None = None
    nbg_rate: float | None = None
    diff: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "bank_rates", MappingProxyType(dict(self.bank_rates)))


class RateTable:
    """Immutable snapshot of the quotes returned by a single fetch.

    Quotes are indexed as ``base -> secondary -> quote`` so lookups never
    build string keys. If the source repeats a pair the first quote wins.
    """

    __slots__ = ("_quotes", "_index", "fetched_at")

    def __init__(self, quotes: Iterable[RateQuote], *, fetched_at: float) -> None:
        ordered = tuple(quotes)
        index: dict[Currency, dict[Currency, RateQuote]] = {}
        for quote in ordered:
            index.setdefault(quote.base, {}).setdefault(quote.secondary, quote)
        self._quotes = ordered
        self._index = MappingProxyType(
            {base: MappingProxyType(row) for base, row in index.items()}
        )
        self.fetched_at = fetched_at

    def __len__(self) -> int:
        return len(self._quotes)

    def __iter__(self):
        return iter(self._quotes)

    def __repr__(self) -> str:
        return f"RateTable(quotes={len(self._quotes)}, fetched_at={self.fetched_at!r})"

    def quote(self, base: Currency, secondary: Currency) -> RateQuote | None:
        return self._index.get(base, {}).get(secondary)

    def buy_rate(self, base: Currency, secondary: Currency) -> float | None:
        """Return the direct ``base -> secondary`` buy rate if quoted."""

        quote = self.quote(base, secondary)
        return quote.buy_rate if quote is not None else None


__all__ = ["BankRate", "Currency", "RateQuote", "RateTable"]
