"""Stay pricing, reservation status and search result ordering"""
import math
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence, Union

from domain.entities import Hotel
from domain.enums import Severity, SortOption, StatusLabel
from domain.value_objects import ReservationStatus

DateLike = Union[date, datetime, str]

ONE_DAY = timedelta(days=1)


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    return datetime.fromisoformat(value.strip()).replace(tzinfo=None)


def _as_date(value: DateLike) -> date:
    return _as_datetime(value).date()


def calculate_nights(check_in: DateLike, check_out: DateLike) -> int:
    """Number of nights between two dates, rounded up.

    Returns 0 when either value cannot be parsed.
    """
    try:
        start = _as_datetime(check_in)
        end = _as_datetime(check_out)
    except (TypeError, ValueError, AttributeError):
        return 0
    return math.ceil((end - start) / ONE_DAY)


def calculate_total_price(price_per_night: float, check_in: DateLike, check_out: DateLike) -> float:
    """Total price of a stay"""
    return price_per_night * calculate_nights(check_in, check_out)


def get_reservation_status(
    check_in: DateLike,
    check_out: DateLike,
    today: Optional[date] = None
) -> ReservationStatus:
    """Derive the display status of a reservation from its dates.

    Rules are evaluated in order:

    1. check-out before today: Completed
    2. check-in today, or today strictly inside the stay: In Progress
    3. check-in after today: Upcoming
    4. anything else: Pending

    With day granularity the last rule only matches a stay that started
    before today and checks out today.
    """
    today = today or date.today()
    check_in_day = _as_date(check_in)
    check_out_day = _as_date(check_out)

    if check_out_day < today:
        return ReservationStatus(label=StatusLabel.COMPLETED, severity=Severity.DEFAULT, cancellable=False)
    if check_in_day == today or (check_in_day < today < check_out_day):
        return ReservationStatus(label=StatusLabel.IN_PROGRESS, severity=Severity.SUCCESS, cancellable=False)
    if check_in_day > today:
        return ReservationStatus(label=StatusLabel.UPCOMING, severity=Severity.PRIMARY, cancellable=True)
    return ReservationStatus(label=StatusLabel.PENDING, severity=Severity.WARNING, cancellable=True)


def sort_hotels(hotels: Sequence[Hotel], sort_by: SortOption = SortOption.RELEVANCE) -> List[Hotel]:
    """Reorder a page of results; equal keys keep their backend order"""
    hotels = list(hotels)
    if sort_by == SortOption.PRICE_LOW:
        hotels.sort(key=lambda h: h.price_per_night or 0)
    elif sort_by == SortOption.PRICE_HIGH:
        hotels.sort(key=lambda h: h.price_per_night or 0, reverse=True)
    elif sort_by == SortOption.RATING:
        hotels.sort(key=lambda h: h.rating or 0, reverse=True)
    return hotels


def page_offset(page: int, page_size: int) -> int:
    """Offset of a 1-based page"""
    return (max(page, 1) - 1) * page_size


def total_pages(returned_count: int, page_size: int) -> int:
    """Page count estimated from the size of one returned page.

    The search API does not report a total, so this is an approximation.
    """
    if page_size <= 0:
        return 1
    return max(1, math.ceil(returned_count / page_size))
