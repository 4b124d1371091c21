"""Country-aware symbol formatting and exchange priority lookup."""

from typing import Final

EXCHANGE_PRIORITY: Final[dict[str, list[str]]] = {
    "US": ["NYSE", "NASDAQ"],
    "GB": ["LSE"],
    "DE": ["XETRA", "FRA"],
    "FR": ["Euronext Paris"],
    "JP": ["JPX"],
    "CA": ["TSX"],
    "IN": ["NSE", "BSE"],
}

# Exchange suffix appended for countries whose vendors expect one
COUNTRY_SUFFIXES: Final[dict[str, str]] = {
    "GB": ".L",
    "DE": ".DE",
}


def get_priority_exchanges(country_code: str) -> list[str]:
    """Return the exchanges to prefer for *country_code* (US if unknown)."""
    return EXCHANGE_PRIORITY.get(country_code, ["US"])


def format_symbol_for_country(symbol: str, country_code: str) -> str:
    """Append the exchange suffix for *country_code* unless one is present.

    ``format_symbol_for_country("VOD", "GB")`` -> ``"VOD.L"``; symbols that
    already carry a ``.`` suffix and countries without a mapping pass through.
    """
    suffix = COUNTRY_SUFFIXES.get(country_code)
    if suffix is None or "." in symbol:
        return symbol
    return f"{symbol}{suffix}"
