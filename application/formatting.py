"""Display formatting helpers"""
import re
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional, Sequence

PLACEHOLDER_IMAGES = [
    "https://images.unsplash.com/photo-1566073771259-6a8506099945?w=800",
    "https://images.unsplash.com/photo-1582719508461-905c673771fd?w=800",
    "https://images.unsplash.com/photo-1520250497591-112f2f40a3f4?w=800",
    "https://images.unsplash.com/photo-1542314831-068cd1dbfeeb?w=800",
    "https://images.unsplash.com/photo-1571896349842-33c89424de2d?w=800",
    "https://images.unsplash.com/photo-1551882547-ff40c63fe5fa?w=800",
]

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£"}

_LEADING_HEX = re.compile(r"^[0-9a-fA-F]+")


def format_price(price, currency: str = "USD") -> str:
    """Whole-unit price with thousands separators, e.g. ``$1,234``"""
    try:
        amount = Decimal(str(price)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return str(price)
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,}"


def format_date(value, fmt: Optional[str] = None) -> str:
    """Readable date such as ``June 1, 2024``; unparseable input is returned as-is"""
    try:
        day = value if isinstance(value, date) else date.fromisoformat(str(value)[:10])
    except ValueError:
        return str(value)
    if fmt:
        return day.strftime(fmt)
    return f"{day:%B} {day.day}, {day.year}"


def get_min_check_in_date(today: Optional[date] = None) -> str:
    """Earliest selectable check-in day"""
    return (today or date.today()).isoformat()


def get_min_check_out_date(check_in=None, today: Optional[date] = None) -> str:
    """Earliest selectable check-out day: the day after check-in"""
    if not check_in:
        return get_min_check_in_date(today)
    day = check_in if isinstance(check_in, date) else date.fromisoformat(str(check_in)[:10])
    return (day + timedelta(days=1)).isoformat()


def get_hotel_image(hotel_id: Optional[str], images: Sequence[str] = ()) -> str:
    """First hotel image, or a placeholder picked from the id"""
    if images:
        return images[0]
    match = _LEADING_HEX.match((hotel_id or "")[-2:] or "0")
    index = int(match.group(0), 16) if match else 0
    return PLACEHOLDER_IMAGES[index % len(PLACEHOLDER_IMAGES)]


def truncate_text(text: Optional[str], max_length: int = 100) -> Optional[str]:
    if not text or len(text) <= max_length:
        return text
    return f"{text[:max_length]}..."


def get_initials(username: Optional[str]) -> str:
    if not username:
        return "?"
    return username[0].upper()
