"""Money aggregation helpers that normalise amounts into a display currency."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol

from pocket_fx.ingestion.models import Currency


class Converter(Protocol):
    def convert(
        self, amount: float, from_currency: Currency | str, to_currency: Currency | str
    ) -> float:
        ...  # pragma: no cover - protocol definition


@dataclass(frozen=True, slots=True)
class TransactionAmount:
    """Signed amount of one transaction: positive is income, negative is spending."""

    amount: float
    currency: Currency
    category: str = ""


@dataclass(frozen=True, slots=True)
class Balance:
    current: float
    income: float
    expenses: float
    currency: Currency


def compute_balance(
    transactions: Iterable[TransactionAmount],
    currency: Currency | str,
    converter: Converter,
) -> Balance:
    """Sum income and expenses after converting every row into ``currency``."""

    target = Currency.coerce(currency)
    income = 0.0
    expenses = 0.0
    for row in transactions:
        converted = converter.convert(row.amount, row.currency, target)
        if row.amount > 0:
            income += converted
        else:
            expenses += abs(converted)
    return Balance(current=income - expenses, income=income, expenses=expenses, currency=target)


def budget_spending(
    transactions: Iterable[TransactionAmount],
    category: str,
    currency: Currency | str,
    converter: Converter,
) -> float:
    """Total spent in ``category``, expressed in ``currency``."""

    return spending_by_category(
        (row for row in transactions if row.category == category), currency, converter
    ).get(category, 0.0)


def spending_by_category(
    transactions: Iterable[TransactionAmount],
    currency: Currency | str,
    converter: Converter,
) -> dict[str, float]:
    target = Currency.coerce(currency)
    totals: dict[str, float] = {}
    for row in transactions:
        if row.amount >= 0:
            continue
        converted = converter.convert(abs(row.amount), row.currency, target)
        totals[row.category] = totals.get(row.category, 0.0) + converted
    return totals


def convert_limit(
    amount: float,
    from_currency: Currency | str,
    to_currency: Currency | str,
    converter: Converter,
) -> float:
    """Express a budget maximum or pot target in another currency."""

    return converter.convert(amount, from_currency, to_currency)


__all__ = [
    "Balance",
    "TransactionAmount",
    "budget_spending",
    "compute_balance",
    "convert_limit",
    "spending_by_category",
]
