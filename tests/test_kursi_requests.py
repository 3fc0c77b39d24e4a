from __future__ import annotations

import json
import logging
from typing import Any

import pytest
import requests

from pocket_fx.ingestion.kursi_requests import (
    KURSI_RATES_URL,
    KursiRequestsClient,
    RateFetchError,
    parse_quote,
    parse_quotes,
    remote_pair,
)
from pocket_fx.ingestion.models import Currency

SAMPLE_PAYLOAD = [
    {
        "baseCurrencyCode": "USD",
        "secondaryCurrencyCode": "GEL",
        "name": "US Dollar",
        "nbgRate": 2.7015,
        "diff": -0.0021,
        "buyRate": 2.69,
        "sellRate": 2.71,
        "bankRates": {
            "TBC": {"buyRate": 2.688, "sellRate": 2.712},
            "BOG": {"buyRate": 2.689, "sellRate": 2.711},
        },
    },
    {
        "baseCurrencyCode": "EUR",
        "secondaryCurrencyCode": "GEL",
        "buyRate": "2.93",
        "sellRate": "2.97",
        "bankRates": {},
    },
    {"baseCurrencyCode": "TRY", "secondaryCurrencyCode": "GEL", "buyRate": 0.08},
    {"baseCurrencyCode": "GBP", "secondaryCurrencyCode": "USD", "buyRate": 1.27},
    {"baseCurrencyCode": "EUR", "secondaryCurrencyCode": "USD", "buyRate": None},
]


def _response(payload: Any, status: int = 200) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.url = KURSI_RATES_URL
    body = payload if isinstance(payload, str) else json.dumps(payload)
    response._content = body.encode("utf-8")
    return response


class _FakeSession:
    def __init__(self, response: requests.Response | None = None, error: Exception | None = None):
        self.headers: dict[str, str] = {}
        self.response = response
        self.error = error
        self.calls: list[tuple[str, float]] = []
        self.closed = False

    def get(self, url: str, *, timeout: float) -> requests.Response:
        self.calls.append((url, timeout))
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response

    def close(self) -> None:
        self.closed = True


def test_parse_quote_translates_remote_codes_and_bank_rates() -> None:
    quote = parse_quote(SAMPLE_PAYLOAD[0])

    assert quote is not None
    assert quote.base is Currency.USD
    assert quote.secondary is Currency.GEO
    assert quote.buy_rate == pytest.approx(2.69)
    assert quote.sell_rate == pytest.approx(2.71)
    assert quote.nbg_rate == pytest.approx(2.7015)
    assert quote.name == "US Dollar"
    assert set(quote.bank_rates) == {"TBC", "BOG"}
    assert quote.bank_rates["BOG"].buy_rate == pytest.approx(2.689)


@pytest.mark.parametrize(
    "record",
    [
        "not-a-mapping",
        {"baseCurrencyCode": "USD", "secondaryCurrencyCode": "GEL"},
        {"baseCurrencyCode": "USD", "secondaryCurrencyCode": "GEL", "buyRate": 0},
        {"baseCurrencyCode": "USD", "secondaryCurrencyCode": "GEL", "buyRate": "n/a"},
        {"baseCurrencyCode": "USD", "secondaryCurrencyCode": "USD", "buyRate": 1},
        {"baseCurrencyCode": "JPY", "secondaryCurrencyCode": "USD", "buyRate": 0.0067},
    ],
)
def test_parse_quote_rejects_unusable_records(record: Any) -> None:
    assert parse_quote(record) is None


def test_parse_quotes_skips_partial_records() -> None:
    quotes = parse_quotes(SAMPLE_PAYLOAD)

    assert [(q.base, q.secondary) for q in quotes] == [
        (Currency.USD, Currency.GEO),
        (Currency.EUR, Currency.GEO),
    ]
    assert quotes[1].buy_rate == pytest.approx(2.93)


def test_parse_quotes_requires_an_array() -> None:
    with pytest.raises(RateFetchError, match="Expected a JSON array"):
        parse_quotes({"rates": []})


def test_parse_quotes_rejects_payload_without_usable_quotes() -> None:
    with pytest.raises(RateFetchError, match="No usable quotes"):
        parse_quotes([{"baseCurrencyCode": "TRY", "secondaryCurrencyCode": "GEL", "buyRate": 1}])


def test_client_fetch_uses_bounded_timeout() -> None:
    session = _FakeSession(_response(SAMPLE_PAYLOAD))
    client = KursiRequestsClient(session=session)  # type: ignore[arg-type]

    quotes = client.fetch()

    assert len(quotes) == 2
    assert session.calls == [(KURSI_RATES_URL, 5.0)]
    assert session.headers["Accept"] == "application/json"


def test_client_wraps_http_errors() -> None:
    session = _FakeSession(_response([], status=503))
    client = KursiRequestsClient(url="https://rates.test/api", session=session)  # type: ignore[arg-type]

    with pytest.raises(RateFetchError, match="HTTP 503") as excinfo:
        client.fetch()
    assert isinstance(excinfo.value.__cause__, requests.HTTPError)


def test_client_rejects_invalid_json() -> None:
    session = _FakeSession(_response("<html>maintenance</html>"))
    client = KursiRequestsClient(session=session)  # type: ignore[arg-type]

    with pytest.raises(RateFetchError, match="invalid JSON"):
        client.fetch()


def test_client_propagates_network_errors() -> None:
    session = _FakeSession(error=requests.Timeout("read timed out"))
    client = KursiRequestsClient(timeout=1.5, session=session)  # type: ignore[arg-type]

    with pytest.raises(requests.Timeout):
        client.fetch()
    assert session.calls[0][1] == 1.5


def test_client_context_manager_closes_session() -> None:
    session = _FakeSession(_response(SAMPLE_PAYLOAD))

    with KursiRequestsClient(session=session) as client:  # type: ignore[arg-type]
        client.fetch()

    assert session.closed


def test_client_logs_pairs_in_remote_codes(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="pocket_fx")
    client = KursiRequestsClient(session=_FakeSession(_response(SAMPLE_PAYLOAD)))  # type: ignore[arg-type]

    client.fetch()

    assert "USD/GEL, EUR/GEL" in caplog.text


def test_remote_pair_uses_service_codes() -> None:
    quote = parse_quote(SAMPLE_PAYLOAD[1])

    assert quote is not None
    assert remote_pair(quote) == "EUR/GEL"
