from __future__ import annotations

from typing import Callable

import pytest

from pocket_fx.ingestion.models import Currency, RateQuote


class FakeClock:
    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSource:
    """Rate source returning canned quotes, or raising ``error`` when set."""

    def __init__(self, quotes: list[RateQuote] | None = None, error: Exception | None = None):
        self.quotes = list(quotes or [])
        self.error = error
        self.calls = 0

    def fetch(self) -> list[RateQuote]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.quotes)


def _quote(base: Currency, secondary: Currency, buy_rate: float) -> RateQuote:
    return RateQuote(base=base, secondary=secondary, buy_rate=buy_rate, sell_rate=buy_rate)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def make_quote() -> Callable[[Currency, Currency, float], RateQuote]:
    return _quote


@pytest.fixture()
def make_source() -> Callable[..., FakeSource]:
    return FakeSource
