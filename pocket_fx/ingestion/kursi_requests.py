"""requests-based client for the kursi.ge public currency quote endpoint."""

from __future__ import annotations

import math
from typing import Any, Mapping

import requests

from pocket_fx.ingestion.models import BankRate, RateQuote
from pocket_fx.utils.currency_codes import from_remote_code, to_remote_code
from pocket_fx.utils.logger import get_logger

LOGGER = get_logger(__name__)
KURSI_RATES_URL = "https://api.kursi.ge:8080/api/public/currencies"
DEFAULT_TIMEOUT_SECONDS = 5.0


class RateFetchError(RuntimeError):
    """Raised when the quote endpoint answers with something unusable."""


def _parse_rate(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def _parse_bank_rates(raw: Any) -> dict[str, BankRate]:
    if not isinstance(raw, Mapping):
        return {}
    banks: dict[str, BankRate] = {}
    for bank_id, payload in raw.items():
        if not isinstance(payload, Mapping):
            continue
        buy = _parse_rate(payload.get("buyRate"))
        sell = _parse_rate(payload.get("sellRate"))
        if buy is None or sell is None:
            continue
        banks[str(bank_id)] = BankRate(buy_rate=buy, sell_rate=sell)
    return banks


def parse_quote(record: Any) -> RateQuote | None:
    """Convert one remote record into a :class:`RateQuote`.

    Returns ``None`` for records that cannot be used for conversion: unknown
    currencies, a missing or non-positive ``buyRate``.
    """

    if not isinstance(record, Mapping):
        return None
    base = from_remote_code(str(record.get("baseCurrencyCode") or ""))
    secondary = from_remote_code(str(record.get("secondaryCurrencyCode") or ""))
    if base is None or secondary is None or base is secondary:
        return None
    buy_rate = _parse_rate(record.get("buyRate"))
    if buy_rate is None or buy_rate <= 0:
        return None
    sell_rate = _parse_rate(record.get("sellRate"))
    return RateQuote(
        base=base,
        secondary=secondary,
        buy_rate=buy_rate,
        sell_rate=sell_rate if sell_rate is not None else buy_rate,
        bank_rates=_parse_bank_rates(record.get("bankRates")),
        name=record.get("name"),
        nbg_rate=_parse_rate(record.get("nbgRate")),
        diff=_parse_rate(record.get("diff")),
    )


def remote_pair(quote: RateQuote) -> str:
    """Label a quote the way the remote service names it, e.g. ``USD/GEL``."""

    return f"{to_remote_code(quote.base)}/{to_remote_code(quote.secondary)}"


def parse_quotes(payload: Any) -> list[RateQuote]:
    """Parse a JSON array of remote records, skipping the unusable ones."""

    if not isinstance(payload, list):
        raise RateFetchError(
            f"Expected a JSON array of quotes, received {type(payload).__name__}"
        )
    quotes: list[RateQuote] = []
    for record in payload:
        quote = parse_quote(record)
        if quote is None:
            LOGGER.debug("Skipping unusable quote record: %r", record)
            continue
        quotes.append(quote)
    if not quotes:
        raise RateFetchError(f"No usable quotes among {len(payload)} records")
    return quotes


class KursiRequestsClient:
    """Fetch the current quote list with a single bounded GET request."""

    def __init__(
        self,
        *,
        url: str = KURSI_RATES_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/json",
                "Cache-Control": "no-cache",
            }
        )

    def fetch(self) -> list[RateQuote]:
        LOGGER.info("Fetching exchange rates from %s", self.url)
        response = self.session.get(self.url, timeout=self.timeout)
        self._raise_with_context(response)
        try:
            payload = response.json()
        except ValueError as exc:
            raise RateFetchError(f"Quote endpoint {self.url} returned invalid JSON") from exc
        quotes = parse_quotes(payload)
        LOGGER.info(
            "Fetched %s usable exchange rates (%s records): %s",
            len(quotes),
            len(payload),
            ", ".join(remote_pair(quote) for quote in quotes),
        )
        return quotes

    def _raise_with_context(self, response: requests.Response) -> None:
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise RateFetchError(
                f"Quote endpoint responded with HTTP {response.status_code} for {self.url}"
            ) from exc

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "KursiRequestsClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "KURSI_RATES_URL",
    "KursiRequestsClient",
    "RateFetchError",
    "parse_quote",
    "parse_quotes",
    "remote_pair",
]
