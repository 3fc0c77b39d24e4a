"""Runtime settings for the conversion stack."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from pocket_fx.ingestion.kursi_requests import DEFAULT_TIMEOUT_SECONDS, KURSI_RATES_URL
from pocket_fx.ingestion.models import Currency
from pocket_fx.rates.cache import DEFAULT_TTL_SECONDS
from pocket_fx.rates.converter import DEFAULT_INTERMEDIATES

ENV_RATES_URL = "POCKET_FX_RATES_URL"
ENV_TIMEOUT = "POCKET_FX_TIMEOUT"
ENV_CACHE_TTL = "POCKET_FX_CACHE_TTL"
ENV_INTERMEDIATES = "POCKET_FX_INTERMEDIATES"


@dataclass(slots=True)
class ExchangeSettings:
    """Where live quotes come from and how long they stay fresh."""

    rates_url: str = KURSI_RATES_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    ttl: float = DEFAULT_TTL_SECONDS
    intermediates: tuple[Currency, ...] = DEFAULT_INTERMEDIATES

    def __post_init__(self) -> None:
        if not self.rates_url:
            raise ValueError("rates_url must not be empty")
        if self.timeout <= 0:
            raise ValueError("timeout must be a positive number of seconds")
        if self.ttl <= 0:
            raise ValueError("ttl must be a positive number of seconds")
        self.intermediates = tuple(Currency.coerce(code) for code in self.intermediates)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExchangeSettings":
        """Build settings from ``POCKET_FX_*`` variables, defaulting the rest."""

        env = os.environ if environ is None else environ
        settings = cls()
        if env.get(ENV_RATES_URL):
            settings.rates_url = env[ENV_RATES_URL].strip()
        if env.get(ENV_TIMEOUT):
            settings.timeout = _positive_seconds(ENV_TIMEOUT, env[ENV_TIMEOUT])
        if env.get(ENV_CACHE_TTL):
            settings.ttl = _positive_seconds(ENV_CACHE_TTL, env[ENV_CACHE_TTL])
        if env.get(ENV_INTERMEDIATES):
            settings.intermediates = tuple(
                Currency.coerce(code)
                for code in env[ENV_INTERMEDIATES].split(",")
                if code.strip()
            )
        return settings


def _positive_seconds(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


__all__ = [
    "ENV_CACHE_TTL",
    "ENV_INTERMEDIATES",
    "ENV_RATES_URL",
    "ENV_TIMEOUT",
    "ExchangeSettings",
]
