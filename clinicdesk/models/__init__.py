from decimal import Decimal, InvalidOperation

from clinicdesk.settings import settings


def format_money(paise: int, symbol: str | None = None) -> str:
    """Format paise as a display string: 149900 -> '₹1,499.00'"""
    sign = "-" if paise < 0 else ""
    rupees = abs(paise) / 100
    return f"{sign}{symbol if symbol is not None else settings.currency_symbol}{rupees:,.2f}"


def parse_money(text: str) -> int | None:
    """Parse an amount string into paise. Returns None on invalid input.

    Accepts formats like '1499', '1499.00', '1,499.50', '₹1,499'.
    """
    text = text.strip().lstrip(settings.currency_symbol).replace(",", "").strip()
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return int((value * 100).to_integral_value())
