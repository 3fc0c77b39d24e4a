"""Abstraction over where live quotes come from."""

from __future__ import annotations

from typing import Protocol

from pocket_fx.ingestion.models import RateQuote


class RateSource(Protocol):
    """Contract for fetching the current quote list.

    Implementations perform their own I/O with a bounded timeout and raise on
    failure; the cache decides whether a failure is fatal.
    """

    def fetch(self) -> list[RateQuote]:
        ...  # pragma: no cover - protocol definition


__all__ = ["RateSource"]
