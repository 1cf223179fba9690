"""Detect when a query is about a listed travel company."""
from __future__ import annotations

import re

# Company name (lower-case) -> exchange symbol.
COMPANY_TICKERS: dict[str, str] = {
    "airbnb": "ABNB",
    "booking.com": "BKNG",
    "booking holdings": "BKNG",
    "priceline": "BKNG",
    "expedia": "EXPE",
    "tripadvisor": "TRIP",
    "trip.com": "TCOM",
    "marriott": "MAR",
    "hilton": "HLT",
    "hyatt": "H",
    "wyndham": "WH",
    "intercontinental hotels": "IHG",
    "delta air lines": "DAL",
    "delta airlines": "DAL",
    "united airlines": "UAL",
    "american airlines": "AAL",
    "southwest airlines": "LUV",
    "jetblue": "JBLU",
    "alaska airlines": "ALK",
    "carnival cruise": "CCL",
    "royal caribbean": "RCL",
    "norwegian cruise": "NCLH",
    "sabre": "SABR",
    "hertz": "HTZ",
    "avis": "CAR",
    "uber": "UBER",
    "lyft": "LYFT",
}

_CASHTAG = re.compile(r"\$([A-Z]{1,5})\b")
_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(rf"(?<![\w.]){re.escape(name)}(?![\w])"), symbol)
    # Longest names first so "delta air lines" wins over shorter overlaps.
    for name, symbol in sorted(COMPANY_TICKERS.items(), key=lambda kv: len(kv[0]), reverse=True)
]


def detect_company_ticker(query: str) -> str | None:
    """Return the symbol of the company a query mentions, if any.

    An explicit cashtag such as ``$ABNB`` takes precedence over name lookup.
    """
    if not query:
        return None
    cashtag = _CASHTAG.search(query)
    if cashtag:
        return cashtag.group(1)
    lowered = query.lower()
    for pattern, symbol in _PATTERNS:
        if pattern.search(lowered):
            return symbol
    return None
