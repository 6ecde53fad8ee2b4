from decimal import ROUND_HALF_UP, Decimal, InvalidOperation


def format_money(cents: int, currency: str = "") -> str:
    """Format minor units as a display string: 339500, 'USD' -> 'USD 3,395.00'"""
    formatted = f"{cents / 100:,.2f}"
    return f"{currency} {formatted}" if currency else formatted


def parse_money(text: str) -> int | None:
    """Parse an amount string into minor units. Returns None on invalid input.

    Accepts formats like '3395', '3395.00', '3,395.50'.
    """
    text = text.strip().replace(",", "")
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
