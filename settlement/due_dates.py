"""Payment and rebate due dates derived from a settlement period.

Credit terms arrive as free text typed into the agency form. Only the
"day N of the month after the settlement period" family is understood;
anything else yields ``None`` instead of a guessed date.
"""

from __future__ import annotations

import calendar
import re
from datetime import date

from settlement.errors import InvalidPeriodError
from settlement.models.counterparty import RebatePeriod

_PERIOD_RE = re.compile(r"(\d{4})-(\d{2})")

CREDIT_TERM_PATTERNS = (
    re.compile(r"次月第\s*(\d{1,2})\s*天"),
    re.compile(r"次月\s*(\d{1,2})\s*[日号]"),
    re.compile(r"\bday\s+(\d{1,2})\s+of\s+(?:the\s+)?(?:next|following)\s+month\b", re.IGNORECASE),
    re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)?\s+(?:day\s+)?of\s+(?:the\s+)?(?:next|following)\s+month\b", re.IGNORECASE),
    re.compile(r"\b(?:next|following)\s+month,?\s+(?:on\s+)?(?:the\s+)?(?:day\s+)?(\d{1,2})(?:st|nd|rd|th)?\b", re.IGNORECASE),
)

REBATE_PERIOD_LABELS = {
    "月": RebatePeriod.MONTHLY,
    "季": RebatePeriod.QUARTERLY,
}


def parse_period(period: str) -> tuple[int, int]:
    match = _PERIOD_RE.fullmatch(period or "")
    if not match:
        raise InvalidPeriodError(period)
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise InvalidPeriodError(period)
    return year, month


def is_valid_period(period: str) -> bool:
    try:
        parse_period(period)
    except InvalidPeriodError:
        return False
    return True


def next_month(year: int, month: int) -> tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


def next_period(period: str) -> str:
    year, month = next_month(*parse_period(period))
    return f"{year:04d}-{month:02d}"


def last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def parse_credit_term_day(credit_term: str | None) -> int | None:
    """Return the requested day of the next month, or None if the rule is not understood."""
    if not credit_term:
        return None
    for pattern in CREDIT_TERM_PATTERNS:
        match = pattern.search(credit_term)
        if match:
            day = int(match.group(1))
            if 1 <= day <= 31:
                return day
            return None
    return None


def payment_due_date(credit_term: str | None, period: str) -> date | None:
    day = parse_credit_term_day(credit_term)
    if day is None:
        return None
    year, month = next_month(*parse_period(period))
    last = last_day_of_month(year, month)
    return date(year, month, min(day, last.day))


def _coerce_rebate_period(rebate_period: RebatePeriod | str | None) -> RebatePeriod | None:
    if rebate_period is None or isinstance(rebate_period, RebatePeriod):
        return rebate_period
    if rebate_period in REBATE_PERIOD_LABELS:
        return REBATE_PERIOD_LABELS[rebate_period]
    try:
        return RebatePeriod(rebate_period.strip().lower())
    except ValueError:
        return None


def rebate_due_date(period: str, rebate_period: RebatePeriod | str | None) -> date | None:
    kind = _coerce_rebate_period(rebate_period)
    if kind is None:
        return None
    year, month = parse_period(period)
    if kind == RebatePeriod.MONTHLY:
        return last_day_of_month(*next_month(year, month))
    quarter_end = ((month - 1) // 3 + 1) * 3
    return last_day_of_month(*next_month(year, quarter_end))
