"""Currency normalization for the Global (USD) view"""

import logging
import math
import re
from typing import Iterable, Tuple

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"

# Local currency units per 1 USD, keyed by code or alias as they appear in the sheets
EXCHANGE_RATES = {
    # Peru
    "PEN": 3.80,
    "PE": 3.80,
    "PERU": 3.80,
    "PERÚ": 3.80,
    "SOL": 3.80,
    "SOLES": 3.80,
    # Colombia
    "COP": 4000.0,
    "CO": 4000.0,
    "COL": 4000.0,
    "COLOMBIA": 4000.0,
    # Mexico
    "MXN": 18.50,
    "MX": 18.50,
    "MEX": 18.50,
    "MEXICO": 18.50,
    "MÉXICO": 18.50,
    # Base
    "USD": 1.0,
    "US": 1.0,
    "DOLAR": 1.0,
    "DÓLAR": 1.0,
}

# Whole-word keywords used when a tag is not a known code, e.g. "Oficina Lima - Peru"
CURRENCY_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("peru", "PEN"),
    ("perú", "PEN"),
    ("sol", "PEN"),
    ("soles", "PEN"),
    ("colombia", "COP"),
    ("cop", "COP"),
    ("mexico", "MXN"),
    ("méxico", "MXN"),
    ("mxn", "MXN"),
)

# Short codes only match exactly; as substrings they would hit unrelated words
CURRENCY_EXACT_CODES = {"pe": "PEN", "pen": "PEN", "co": "COP", "mx": "MXN"}

COUNTRY_CURRENCIES = {
    "Peru": "PEN",
    "Colombia": "COP",
    "Mexico": "MXN",
    "Global": "USD",
}


def infer_currency(tag: str) -> str:
    """
    Infer a currency code from a free-form country or currency label.

    Returns DEFAULT_CURRENCY when nothing matches.
    """
    if not tag:
        return DEFAULT_CURRENCY

    text = tag.strip().lower()
    if text in CURRENCY_EXACT_CODES:
        return CURRENCY_EXACT_CODES[text]

    words = set(re.findall(r"\w+", text))
    for keyword, code in CURRENCY_KEYWORDS:
        if keyword in words:
            return code
    return DEFAULT_CURRENCY


def resolve_rate(tag: str) -> Tuple[float, bool]:
    """
    Look up the USD exchange rate for a currency-or-country tag.

    Returns (rate, resolved). Unresolved tags use a 1:1 rate, i.e. the amount is
    treated as already being in USD.
    """
    if not tag:
        return 1.0, False

    key = tag.strip().upper()
    if key in EXCHANGE_RATES:
        return EXCHANGE_RATES[key], True

    inferred = infer_currency(tag)
    if inferred != DEFAULT_CURRENCY:
        return EXCHANGE_RATES[inferred], True
    return 1.0, False


def convert_to_usd(amount: float, tag: str) -> float:
    """Convert a local-currency amount to USD; unknown tags pass through unchanged"""
    if not amount or not math.isfinite(amount):
        return 0.0

    rate, resolved = resolve_rate(tag)
    if not resolved:
        logger.warning(
            "Unknown currency tag, assuming USD",
            extra={"currency_tag": tag, "amount": amount},
        )
    return amount / rate


def sum_amounts_with_conversion(amounts: Iterable[Tuple[float, str]], normalize: bool) -> float:
    """Sum (amount, tag) pairs, converting to USD only when normalizing"""
    if normalize:
        return sum(convert_to_usd(amount, tag) for amount, tag in amounts)
    return sum(amount for amount, _ in amounts)
