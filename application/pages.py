"""Pages - per-view state and actions.

A page is created for one view, loads what it needs through the services
and keeps its own loading flag, error, dialogs and notification. Nothing
outside the page mutates its lists.
"""
import asyncio
import logging
import re
from datetime import date
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ValidationError

from application.services import AdminService, AuthService, HotelService, ReservationService
from application.session import SessionStore
from application.validators import (
    VALID, combine_validations, validate_date_range, validate_email, validate_login_password,
    validate_login_username, validate_password, validate_phone, validate_price, validate_rating,
    validate_required, validate_room_count, validate_url, validate_username
)
from domain.auth import AuthResult, User
from domain.entities import (
    DEFAULT_CHECK_IN_TIME, DEFAULT_CHECK_OUT_TIME, Hotel, Reservation, parse_day
)
from domain.enums import DeleteTarget, Severity, SortOption, UserRole
from domain.rules import (
    calculate_nights, calculate_total_price, get_reservation_status, page_offset,
    sort_hotels, total_pages
)
from domain.value_objects import DateRange, Notification, Redirect, ReservationStatus
from infrastructure.http_client import ApiError, error_message

logger = logging.getLogger(__name__)

HOME_PATH = "/"
SEARCH_PATH = "/search"
LOGIN_PATH = "/login"
RESERVATIONS_PATH = "/reservations"
ADMIN_PATH = "/admin"

DEFAULT_PAGE_SIZE = 12
ADMIN_FETCH_LIMIT = 100
REDIRECT_DELAY_SECONDS = 1.5

AMENITY_LABELS = {
    "wifi": "Free WiFi",
    "pool": "Pool",
    "restaurant": "Restaurant",
    "gym": "Gym",
    "spa": "Spa",
    "parking": "Parking",
}

_LEADING_FLOAT = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_LEADING_INT = re.compile(r"^\s*[+-]?\d+")


def hotel_path(hotel_id: str) -> str:
    return f"/hotels/{hotel_id}"


def coerce_float(value) -> float:
    """Leading number of ``value``, or 0 when there is none"""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if value == value else 0.0
    match = _LEADING_FLOAT.match(str(value or ""))
    return float(match.group(0)) if match else 0.0


def coerce_int(value) -> int:
    """Leading integer of ``value``, or 0 when there is none"""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float):
        return int(value) if value == value else 0
    match = _LEADING_INT.match(str(value or ""))
    return int(match.group(0)) if match else 0


class Page:
    """State shared by every page"""

    def __init__(self):
        self.loading = False
        self.error: Optional[str] = None
        self.notification: Optional[Notification] = None

    def notify(self, message: str, severity: Severity = Severity.SUCCESS) -> None:
        self.notification = Notification(message=message, severity=severity)

    def dismiss_notification(self) -> None:
        self.notification = None

    def clear_error(self) -> None:
        self.error = None


# ============================================================================
# SEARCH
# ============================================================================

class SearchPage(Page):
    """Hotel search results with client-side sorting and pagination"""

    def __init__(
        self,
        hotel_service: HotelService,
        query: str = "",
        page_size: int = DEFAULT_PAGE_SIZE
    ):
        super().__init__()
        self.hotel_service = hotel_service
        self.query = query
        self.page = 1
        self.page_size = page_size
        self.sort_by = SortOption.RELEVANCE
        self.hotels: List[Hotel] = []
        self.total_pages = 1
        self.loading = True

    def set_query(self, query: str) -> None:
        self.query = query
        self.page = 1

    def set_page(self, page: int) -> None:
        self.page = max(1, page)

    def set_sort(self, sort_by: Union[SortOption, str]) -> None:
        self.sort_by = SortOption(sort_by)

    @property
    def url_params(self) -> Dict[str, str]:
        return {"q": self.query} if self.query else {}

    @property
    def is_empty(self) -> bool:
        return not self.loading and not self.hotels and self.error is None

    @property
    def show_pagination(self) -> bool:
        return not self.loading and bool(self.hotels) and self.total_pages > 1

    async def load(self) -> List[Hotel]:
        self.loading = True
        self.error = None
        try:
            results = await self.hotel_service.search(
                self.query,
                page_offset(self.page, self.page_size),
                self.page_size
            )
        except ApiError as e:
            logger.error("Error searching hotels: %s", e)
            self.error = "Could not load hotels. Please try again later."
            self.hotels = []
            self.total_pages = 1
        else:
            self.hotels = sort_hotels(results, self.sort_by)
            self.total_pages = total_pages(len(self.hotels), self.page_size)
        finally:
            self.loading = False
        return self.hotels


# ============================================================================
# HOTEL DETAIL / BOOKING
# ============================================================================

class BookingDialog:
    """Date selection for a booking; nights and price are derived on read"""

    def __init__(self):
        self.open = False
        self.submitting = False
        self.check_in: Optional[str] = None
        self.check_out: Optional[str] = None

    def select_dates(self, check_in=None, check_out=None) -> None:
        if check_in is not None:
            self.check_in = check_in.isoformat() if isinstance(check_in, date) else check_in
        if check_out is not None:
            self.check_out = check_out.isoformat() if isinstance(check_out, date) else check_out

    def reset(self) -> None:
        self.open = False
        self.check_in = None
        self.check_out = None

    @property
    def dates_selected(self) -> bool:
        return bool(self.check_in and self.check_out)

    @property
    def nights(self) -> int:
        if not self.dates_selected:
            return 0
        return calculate_nights(self.check_in, self.check_out)

    def total_price(self, price_per_night: float) -> float:
        if not self.dates_selected:
            return 0
        return calculate_total_price(price_per_night, self.check_in, self.check_out)


class HotelDetailPage(Page):
    """A single hotel with its booking dialog"""

    back_path = SEARCH_PATH

    def __init__(
        self,
        hotel_id: str,
        hotel_service: HotelService,
        reservation_service: ReservationService,
        session: SessionStore
    ):
        super().__init__()
        self.hotel_id = hotel_id
        self.hotel_service = hotel_service
        self.reservation_service = reservation_service
        self.session = session
        self.hotel: Optional[Hotel] = None
        self.booking = BookingDialog()
        self.loading = True

    @property
    def not_found(self) -> bool:
        return not self.loading and self.hotel is None

    @property
    def amenity_labels(self) -> List[str]:
        if self.hotel is None:
            return []
        return [AMENITY_LABELS.get(a, a) for a in self.hotel.amenities]

    @property
    def total_price(self) -> float:
        if self.hotel is None:
            return 0
        return self.booking.total_price(self.hotel.price_per_night)

    async def load(self) -> Optional[Hotel]:
        self.loading = True
        self.error = None
        try:
            self.hotel = await self.hotel_service.get_by_id(self.hotel_id)
        except ApiError as e:
            logger.error("Error fetching hotel %s: %s", self.hotel_id, e)
            self.hotel = None
            self.error = "Could not load hotel information."
        finally:
            self.loading = False
        return self.hotel

    def open_booking(self) -> Optional[Redirect]:
        """Open the dialog, or send anonymous users to log in first"""
        if not self.session.is_authenticated:
            return Redirect(path=LOGIN_PATH, return_to=hotel_path(self.hotel_id))
        self.booking.open = True
        return None

    def close_booking(self) -> None:
        self.booking.reset()

    def _validate_booking(self, today: Optional[date] = None) -> Optional[str]:
        if not self.booking.dates_selected:
            return "Please select check-in and check-out dates"
        try:
            check_in = parse_day(self.booking.check_in)
            check_out = parse_day(self.booking.check_out)
        except ValueError:
            return "Please select check-in and check-out dates"
        try:
            DateRange(check_in=check_in, check_out=check_out)
        except ValidationError:
            return "Check-out date must be after check-in date"
        return validate_date_range(check_in, check_out, today).error

    async def submit_booking(self, today: Optional[date] = None) -> bool:
        """Create the reservation; the dialog stays open on failure"""
        problem = self._validate_booking(today)
        if problem:
            self.notify(problem, Severity.WARNING)
            return False
        if self.hotel is None:
            self.notify("Could not load hotel information.", Severity.ERROR)
            return False

        self.booking.submitting = True
        try:
            await self.reservation_service.create(
                self.hotel.id or self.hotel_id,
                self.hotel.name,
                self.booking.check_in,
                self.booking.check_out
            )
        except ApiError as e:
            logger.error("Error creating reservation: %s", e)
            self.notify(error_message(e, "Error creating reservation"), Severity.ERROR)
            return False
        finally:
            self.booking.submitting = False

        self.notify("Reservation created successfully!")
        self.close_booking()
        return True


# ============================================================================
# MY RESERVATIONS
# ============================================================================

class ReservationRow(BaseModel):
    """A reservation with its display values"""
    reservation: Reservation
    status: ReservationStatus
    nights: int


class MyReservationsPage(Page):
    """The logged-in user's reservations"""

    def __init__(self, reservation_service: ReservationService, session: SessionStore):
        super().__init__()
        self.reservation_service = reservation_service
        self.session = session
        self.reservations: List[Reservation] = []
        self.pending_cancel: Optional[Reservation] = None
        self.cancelling = False
        self.loading = True

    def rows(self, today: Optional[date] = None) -> List[ReservationRow]:
        return [
            ReservationRow(
                reservation=r,
                status=get_reservation_status(r.check_in, r.check_out, today),
                nights=calculate_nights(r.check_in, r.check_out)
            )
            for r in self.reservations
        ]

    async def load(self) -> Optional[Redirect]:
        if not self.session.is_authenticated:
            return Redirect(path=LOGIN_PATH, return_to=RESERVATIONS_PATH)

        self.loading = True
        try:
            self.reservations = await self.reservation_service.get_by_user_id(self.session.user.id)
        except ApiError as e:
            logger.error("Error fetching reservations: %s", e)
            self.error = "Could not load reservations"
        finally:
            self.loading = False
        return None

    def find(self, reservation_id: str) -> Optional[Reservation]:
        for reservation in self.reservations:
            if reservation.id == reservation_id:
                return reservation
        return None

    def request_cancel(self, reservation: Reservation, today: Optional[date] = None) -> bool:
        """Ask for confirmation; stays that started or ended cannot be cancelled"""
        if not get_reservation_status(reservation.check_in, reservation.check_out, today).cancellable:
            self.notify("This reservation can no longer be cancelled", Severity.WARNING)
            return False
        self.pending_cancel = reservation
        return True

    def dismiss_cancel(self) -> None:
        self.pending_cancel = None

    async def confirm_cancel(self) -> bool:
        """Cancel the reservation awaiting confirmation"""
        reservation = self.pending_cancel
        if reservation is None:
            return False

        self.cancelling = True
        try:
            await self.reservation_service.cancel(reservation.id)
        except ApiError as e:
            logger.error("Error cancelling reservation %s: %s", reservation.id, e)
            self.notify(error_message(e, "Error cancelling reservation"), Severity.ERROR)
            return False
        else:
            self.reservations = [r for r in self.reservations if r.id != reservation.id]
            self.notify("Reservation cancelled successfully")
            return True
        finally:
            self.cancelling = False
            self.pending_cancel = None


# ============================================================================
# ADMIN
# ============================================================================

class DashboardStats(BaseModel):
    hotels: int
    users: int
    administrators: int


class PendingDelete(BaseModel):
    target: DeleteTarget
    item_id: str
    label: str = ""


class DashboardPage(Page):
    """Admin overview of hotels and users"""

    def __init__(
        self,
        session: SessionStore,
        hotel_service: HotelService,
        auth_service: AuthService,
        admin_service: AdminService,
        fetch_limit: int = ADMIN_FETCH_LIMIT
    ):
        super().__init__()
        self.session = session
        self.hotel_service = hotel_service
        self.auth_service = auth_service
        self.admin_service = admin_service
        self.fetch_limit = fetch_limit
        self.hotels: List[Hotel] = []
        self.users: List[User] = []
        self.pending_delete: Optional[PendingDelete] = None
        self.deleting = False
        self.loading = True

    @property
    def stats(self) -> DashboardStats:
        return DashboardStats(
            hotels=len(self.hotels),
            users=len(self.users),
            administrators=len([u for u in self.users if u.role == UserRole.ADMINISTRATOR])
        )

    async def load(self) -> Optional[Redirect]:
        if not self.session.is_admin:
            return Redirect(path=LOGIN_PATH)

        self.loading = True
        self.error = None
        try:
            hotels, users = await asyncio.gather(
                self.hotel_service.search("", 0, self.fetch_limit),
                self.auth_service.get_all_users()
            )
        except ApiError as e:
            logger.error("Error fetching dashboard data: %s", e)
            self.error = "Error loading data"
        else:
            self.hotels = hotels
            self.users = users
        finally:
            self.loading = False
        return None

    def find(self, target: Union[DeleteTarget, str], item_id: str) -> Optional[Union[Hotel, User]]:
        items = self.hotels if DeleteTarget(target) == DeleteTarget.HOTEL else self.users
        for item in items:
            if str(item.id) == str(item_id):
                return item
        return None

    def request_delete(self, target: Union[DeleteTarget, str], item: Union[Hotel, User]) -> None:
        label = item.name if isinstance(item, Hotel) else item.username
        self.pending_delete = PendingDelete(target=DeleteTarget(target), item_id=str(item.id), label=label)

    def cancel_delete(self) -> None:
        self.pending_delete = None

    async def confirm_delete(self) -> bool:
        """Delete the confirmed item; local lists change only on success"""
        pending = self.pending_delete
        if pending is None:
            return False

        self.deleting = True
        try:
            if pending.target == DeleteTarget.HOTEL:
                await self.admin_service.delete_hotel(pending.item_id)
                self.hotels = [h for h in self.hotels if str(h.id) != pending.item_id]
                self.notify("Hotel deleted successfully")
            else:
                await self.auth_service.delete_user(pending.item_id)
                self.users = [u for u in self.users if str(u.id) != pending.item_id]
                self.notify("User deleted successfully")
        except ApiError as e:
            logger.error("Error deleting %s %s: %s", pending.target.value, pending.item_id, e)
            self.notify(error_message(e, "Error deleting item"), Severity.ERROR)
            return False
        finally:
            self.deleting = False
            self.pending_delete = None
        return True


class HotelFormData(BaseModel):
    """Raw admin form input; numeric fields hold what the user typed"""
    name: str = ""
    description: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    phone: str = ""
    email: str = ""
    price_per_night: Union[str, float] = ""
    rating: Union[str, float] = ""
    available_rooms: Union[str, int] = ""
    check_in_time: str = DEFAULT_CHECK_IN_TIME
    check_out_time: str = DEFAULT_CHECK_OUT_TIME
    amenities: List[str] = []
    images: List[str] = []

    @classmethod
    def from_hotel(cls, hotel: Hotel) -> "HotelFormData":
        return cls(
            name=hotel.name,
            description=hotel.description,
            address=hotel.address,
            city=hotel.city,
            state=hotel.state,
            country=hotel.country,
            phone=hotel.phone,
            email=hotel.email,
            price_per_night=hotel.price_per_night,
            rating=hotel.rating,
            available_rooms=hotel.available_rooms,
            check_in_time=hotel.check_in_time or DEFAULT_CHECK_IN_TIME,
            check_out_time=hotel.check_out_time or DEFAULT_CHECK_OUT_TIME,
            amenities=list(hotel.amenities),
            images=list(hotel.images),
        )

    def to_hotel(self, hotel_id: Optional[str] = None) -> Hotel:
        """Map the form 1:1 onto a Hotel, numbers falling back to 0"""
        return Hotel(
            id=hotel_id,
            name=self.name,
            description=self.description,
            address=self.address,
            city=self.city,
            state=self.state,
            country=self.country,
            phone=self.phone,
            email=self.email,
            price_per_night=coerce_float(self.price_per_night),
            rating=coerce_float(self.rating),
            available_rooms=coerce_int(self.available_rooms),
            check_in_time=self.check_in_time,
            check_out_time=self.check_out_time,
            amenities=list(self.amenities),
            images=list(self.images),
        )


class HotelFormPage(Page):
    """Create or edit a hotel"""

    def __init__(
        self,
        session: SessionStore,
        hotel_service: HotelService,
        admin_service: AdminService,
        hotel_id: Optional[str] = None,
        redirect_delay: float = REDIRECT_DELAY_SECONDS
    ):
        super().__init__()
        self.session = session
        self.hotel_service = hotel_service
        self.admin_service = admin_service
        self.hotel_id = hotel_id
        self.redirect_delay = redirect_delay
        self.form = HotelFormData()
        self.field_errors: List[str] = []
        self.fetch_loading = self.is_editing

    @property
    def is_editing(self) -> bool:
        return bool(self.hotel_id)

    def access_redirect(self) -> Optional[Redirect]:
        if not self.session.is_admin:
            return Redirect(path=LOGIN_PATH)
        return None

    async def load(self) -> Optional[Redirect]:
        redirect = self.access_redirect()
        if redirect is not None or not self.is_editing:
            return redirect

        self.fetch_loading = True
        try:
            hotel = await self.hotel_service.get_by_id(self.hotel_id)
        except ApiError as e:
            logger.error("Error fetching hotel %s: %s", self.hotel_id, e)
            self.error = "Could not load hotel information"
        else:
            self.form = HotelFormData.from_hotel(hotel)
        finally:
            self.fetch_loading = False
        return None

    def update(self, **fields) -> None:
        self.form = self.form.model_copy(update=fields)

    def add_amenity(self, amenity: str) -> None:
        amenity = (amenity or "").strip()
        if amenity and amenity not in self.form.amenities:
            self.update(amenities=self.form.amenities + [amenity])

    def remove_amenity(self, amenity: str) -> None:
        self.update(amenities=[a for a in self.form.amenities if a != amenity])

    def add_image(self, url: str) -> None:
        url = (url or "").strip()
        if url and url not in self.form.images:
            self.update(images=self.form.images + [url])

    def remove_image(self, url: str) -> None:
        self.update(images=[i for i in self.form.images if i != url])

    def validate(self) -> bool:
        """Check the form; messages land in ``field_errors``"""
        form = self.form
        price = validate_required(form.price_per_night, "Price")
        rooms = validate_required(form.available_rooms, "Available rooms")
        check = combine_validations(
            validate_required(form.name.strip(), "Name"),
            validate_required(form.address.strip(), "Address"),
            validate_required(form.city.strip(), "City"),
            validate_required(form.country.strip(), "Country"),
            validate_price(form.price_per_night) if price.is_valid else price,
            validate_rating(form.rating) if str(form.rating).strip() else VALID,
            validate_room_count(form.available_rooms) if rooms.is_valid else rooms,
            validate_email(form.email),
            validate_phone(form.phone),
            *[validate_url(image) for image in form.images]
        )
        self.field_errors = check.errors
        return check.is_valid

    async def submit(self) -> Optional[Redirect]:
        """Save the hotel; on success the dashboard follows after a short delay"""
        self.error = None
        if not self.validate():
            return None

        self.loading = True
        hotel = self.form.to_hotel(self.hotel_id)
        try:
            if self.is_editing:
                await self.admin_service.update_hotel(self.hotel_id, hotel)
                self.notify("Hotel updated successfully")
            else:
                await self.admin_service.create_hotel(hotel)
                self.notify("Hotel created successfully")
        except ApiError as e:
            logger.error("Error saving hotel: %s", e)
            self.error = error_message(e, "Error saving hotel")
            return None
        finally:
            self.loading = False
        return Redirect(path=ADMIN_PATH, delay=self.redirect_delay)


# ============================================================================
# LOGIN / REGISTER
# ============================================================================

class LoginPage(Page):
    """Credentials form; returns to where the user came from"""

    def __init__(self, session: SessionStore, return_to: Optional[str] = None):
        super().__init__()
        self.session = session
        self.return_to = return_to or HOME_PATH
        self.field_errors: List[str] = []

    async def submit(self, username: str, password: str) -> Optional[Redirect]:
        check = combine_validations(validate_login_username(username), validate_login_password(password))
        self.field_errors = check.errors
        if not check.is_valid:
            return None

        result: AuthResult = await self.session.login(username, password)
        self.error = result.error
        if result.success:
            return Redirect(path=self.return_to)
        return None


class RegisterPage(Page):
    """Sign-up form; a successful sign-up is also logged in"""

    def __init__(self, session: SessionStore):
        super().__init__()
        self.session = session
        self.field_errors: List[str] = []

    async def submit(
        self,
        username: str,
        password: str,
        confirm_password: str,
        role: Union[UserRole, str] = UserRole.CUSTOMER
    ) -> Optional[Redirect]:
        confirm = validate_required(confirm_password, "Password confirmation")
        if confirm.is_valid and confirm_password != password:
            confirm = confirm.model_copy(update={"is_valid": False, "error": "Passwords do not match"})
        check = combine_validations(validate_username(username), validate_password(password), confirm)
        self.field_errors = check.errors
        if not check.is_valid:
            return None

        result = await self.session.register(username, password, UserRole(role))
        self.error = result.error
        if result.success:
            return Redirect(path=HOME_PATH)
        return None
