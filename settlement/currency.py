import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from settlement.constants import CURRENCY_ALIASES
from settlement.settings import settings


def normalize_currency(code: str | None) -> str:
    code = (code or "").strip().upper()
    return CURRENCY_ALIASES.get(code, code)


def _is_finite(value: int | float | Decimal) -> bool:
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, float):
        return math.isfinite(value)
    return True


def to_reference(
    amount: int | float | Decimal,
    rate: int | float | Decimal,
    currency: str | None = None,
    reference: str | None = None,
) -> int:
    """Convert minor units of ``currency`` into minor units of the reference currency.

    Amounts already in the reference currency pass through unchanged. A
    non-positive or non-finite rate, or a non-finite amount, yields 0 so
    invalid arithmetic never reaches displayed totals.
    """
    if not _is_finite(amount):
        return 0
    if currency is not None:
        if normalize_currency(currency) == normalize_currency(reference or settings.reference_currency):
            rate = 1
    if not _is_finite(rate):
        return 0
    try:
        rate_dec = Decimal(str(rate)) if isinstance(rate, float) else Decimal(rate)
        amount_dec = Decimal(str(amount)) if isinstance(amount, float) else Decimal(amount)
    except InvalidOperation:
        return 0
    if rate_dec <= 0:
        return 0
    return int((amount_dec * rate_dec).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
