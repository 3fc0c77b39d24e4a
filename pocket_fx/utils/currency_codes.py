"""Translation between local currency codes and the remote quote service."""

from __future__ import annotations

from typing import Final

from pocket_fx.ingestion.models import Currency

# The local lari code predates ISO 4217's ``GEL``; the remote service only knows GEL.
LOCAL_TO_REMOTE: Final[dict[Currency, str]] = {Currency.GEO: "GEL"}
REMOTE_TO_LOCAL: Final[dict[str, Currency]] = {
    remote: local for local, remote in LOCAL_TO_REMOTE.items()
}


def to_remote_code(currency: Currency) -> str:
    """Return the code the remote service uses for ``currency``."""

    return LOCAL_TO_REMOTE.get(currency, currency.value)


def from_remote_code(code: str) -> Currency | None:
    """Map a remote currency code to :class:`Currency`, or ``None`` if unsupported."""

    cleaned = code.strip().upper()
    if cleaned in REMOTE_TO_LOCAL:
        return REMOTE_TO_LOCAL[cleaned]
    try:
        return Currency(cleaned)
    except ValueError:
        return None


__all__ = ["LOCAL_TO_REMOTE", "REMOTE_TO_LOCAL", "from_remote_code", "to_remote_code"]
