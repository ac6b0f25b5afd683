"""Date, time and amount recognizers shared by the heuristic detectors."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

_MONTHS: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_MONTH_NAME = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?"
    r"|aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)

NUMERIC_DATE = re.compile(r"\b(\d{1,2})[-/](\d{1,2})[-/](\d{2,4})\b")
MONTH_DAY_YEAR = re.compile(
    rf"\b({_MONTH_NAME})\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?,?\s+(\d{{4}})\b", re.IGNORECASE
)
DAY_MONTH_YEAR = re.compile(
    rf"\b(\d{{1,2}})(?:st|nd|rd|th)?\s+({_MONTH_NAME})\.?,?\s+(\d{{4}})\b", re.IGNORECASE
)

TIME = re.compile(
    r"\b(\d{1,2}):(\d{2})\s*([ap]\.?m\.?)?(?![\w:])"  # 7:30, 7:30 pm, 19:30
    r"|\b(\d{1,2})\s*([ap]\.?m\.?)(?!\w)",  # 7pm, 7 a.m.
    re.IGNORECASE,
)

_NUMBER = r"(\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)"

CURRENCY_SYMBOLS: dict[str, str] = {"$": "USD", "€": "EUR", "£": "GBP", "₹": "INR"}
_SYMBOL_BY_CURRENCY = {code: symbol for symbol, code in CURRENCY_SYMBOLS.items()}

_SYMBOL_AMOUNT = re.compile(r"([$€£₹])\s*" + _NUMBER)
_CODE_AMOUNT = re.compile(_NUMBER + r"\s*(USD|EUR|GBP|INR|CAD|AUD)\b")
_DECIMAL_AMOUNT = re.compile(r"(?<![\d.,])(\d+\.\d{2})(?![\d.])")

TOTAL_LABELS = ("total", "amount", "paid")


@dataclass(frozen=True)
class DateToken:
    """A date found in text. ``value`` is None when the token is not a real date."""

    text: str
    start: int
    value: date | None


@dataclass(frozen=True)
class Amount:
    value: float
    currency: str | None  # None when no symbol or code was attached


def _four_digit_year(year: int) -> int:
    if year >= 100:
        return year
    return 2000 + year if year < 50 else 1900 + year


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _numeric_value(match: re.Match[str]) -> date | None:
    first, second, year = (int(g) for g in match.groups())
    year = _four_digit_year(year)
    # Month first; fall back to day first when the leading number cannot be a month.
    if first > 12 >= second:
        first, second = second, first
    return _safe_date(year, first, second)


def _month_day_year_value(match: re.Match[str]) -> date | None:
    month, day, year = match.groups()
    return _safe_date(int(year), _MONTHS[month[:3].lower()], int(day))


def _day_month_year_value(match: re.Match[str]) -> date | None:
    day, month, year = match.groups()
    return _safe_date(int(year), _MONTHS[month[:3].lower()], int(day))


def find_numeric_date(text: str) -> DateToken | None:
    """Return the first ``M/D/Y`` (or ``M-D-Y``) date in ``text``."""
    match = NUMERIC_DATE.search(text)
    if match is None:
        return None
    return DateToken(match.group(0), match.start(), _numeric_value(match))


def find_date(text: str) -> DateToken | None:
    """Return the earliest numeric, "Month Day, Year" or "Day Month Year" date."""
    candidates: list[DateToken] = []
    numeric = find_numeric_date(text)
    if numeric is not None:
        candidates.append(numeric)
    for pattern, to_value in (
        (MONTH_DAY_YEAR, _month_day_year_value),
        (DAY_MONTH_YEAR, _day_month_year_value),
    ):
        match = pattern.search(text)
        if match is not None:
            candidates.append(DateToken(match.group(0), match.start(), to_value(match)))
    if not candidates:
        return None
    return min(candidates, key=lambda token: token.start)


def to_iso_date(token: DateToken | None, today: date | None = None) -> str:
    """ISO ``YYYY-MM-DD`` for ``token``, or today's date if it has no usable value."""
    if token is not None and token.value is not None:
        return token.value.isoformat()
    return (today or date.today()).isoformat()


def find_time(text: str) -> str | None:
    """Return the first clock time in ``text`` normalized to 24-hour ``HH:MM``."""
    for match in TIME.finditer(text):
        if match.group(1) is not None:
            hour, minute, meridiem = int(match.group(1)), int(match.group(2)), match.group(3)
        else:
            hour, minute, meridiem = int(match.group(4)), 0, match.group(5)
        if minute > 59:
            continue
        if meridiem:
            if not 1 <= hour <= 12:
                continue
            is_pm = meridiem.lower().startswith("p")
            hour = hour % 12 + (12 if is_pm else 0)
        elif hour > 23:
            continue
        return f"{hour:02d}:{minute:02d}"
    return None


def parse_number(raw: str) -> float:
    return float(raw.replace(",", ""))


def find_labeled_amount(text: str, labels: tuple[str, ...] = TOTAL_LABELS) -> Amount | None:
    """Return the amount following one of ``labels`` (e.g. ``Total: $12.50``).

    Labels match whole words, so ``subtotal`` does not count as ``total``.
    """
    label = "|".join(re.escape(lbl) for lbl in labels)
    pattern = re.compile(rf"\b(?:{label})\b[\s:]*([$€£₹])?\s*{_NUMBER}", re.IGNORECASE)
    match = pattern.search(text)
    if match is None:
        return None
    symbol = match.group(1)
    return Amount(parse_number(match.group(2)), CURRENCY_SYMBOLS.get(symbol) if symbol else None)


def find_currency_amount(text: str) -> Amount | None:
    """Return the first money-like amount in ``text``.

    Preference order: symbol-prefixed (``$25``), code-suffixed (``25 EUR``),
    labeled (``amount 25``), then any bare decimal (``25.00``). Plain integers
    are ignored so dates and codes are not mistaken for amounts.
    """
    match = _SYMBOL_AMOUNT.search(text)
    if match is not None:
        return Amount(parse_number(match.group(2)), CURRENCY_SYMBOLS[match.group(1)])
    match = _CODE_AMOUNT.search(text)
    if match is not None:
        return Amount(parse_number(match.group(1)), match.group(2).upper())
    labeled = find_labeled_amount(text, ("amount", "value", "balance"))
    if labeled is not None:
        return labeled
    match = _DECIMAL_AMOUNT.search(text)
    if match is not None:
        return Amount(parse_number(match.group(1)), None)
    return None


def detect_currency(text: str, default: str) -> str:
    """Currency of the first symbol or ISO code in ``text``, else ``default``."""
    match = _SYMBOL_AMOUNT.search(text)
    if match is not None:
        return CURRENCY_SYMBOLS[match.group(1)]
    match = _CODE_AMOUNT.search(text)
    if match is not None:
        return match.group(2).upper()
    return default


def format_money(amount: float, currency: str) -> str:
    symbol = _SYMBOL_BY_CURRENCY.get(currency)
    if symbol:
        return f"{symbol}{amount:.2f}"
    return f"{amount:.2f} {currency}"
