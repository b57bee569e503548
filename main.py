from contextlib import asynccontextmanager
from datetime import date
from typing import Optional

from fastapi import FastAPI, HTTPException, Depends, status

from api.schemas import (
    # Session
    LoginRequest, RegisterRequest, SessionResponse,
    # Hotels
    SearchResponse, HotelDetailResponse, BookingRequest,
    # Reservations
    ReservationsResponse,
    # Admin
    DashboardResponse, HotelFormResponse, HotelSavedResponse, MessageResponse
)
from api.dependencies import guard
from application.formatting import format_price, get_hotel_image
from application.pages import (
    SearchPage, HotelDetailPage, MyReservationsPage, DashboardPage, HotelFormPage,
    HotelFormData, LoginPage, RegisterPage
)
from application.services import AuthService, HotelService, ReservationService, AdminService, HealthService
from application.session import SessionStore
from config import Settings, load_settings
from domain.enums import DeleteTarget, SortOption
from infrastructure.http_client import ApiClient, ApiError
from infrastructure.storage.key_value_storages import InMemoryStorage, JsonFileStorage

settings = load_settings()

# Initialize storage, backend client and session
storage = JsonFileStorage(settings.storage_path) if settings.storage_path else InMemoryStorage()
api_client = ApiClient(settings.api_url, storage, timeout=settings.timeout)
session_store = SessionStore(AuthService(api_client), storage)
session_store.hydrate()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await api_client.aclose()


app = FastAPI(
    title="Hotel Booking Client",
    description="Search, book and administer hotels through the hotel backend API",
    version="1.0.0",
    lifespan=lifespan
)


# Dependency injection
def get_settings() -> Settings:
    return settings

def get_session_store() -> SessionStore:
    return session_store

def get_auth_service() -> AuthService:
    return AuthService(api_client)

def get_hotel_service() -> HotelService:
    return HotelService(api_client)

def get_reservation_service() -> ReservationService:
    return ReservationService(api_client)

def get_admin_service() -> AdminService:
    return AdminService(api_client)

def get_health_service() -> HealthService:
    return HealthService(api_client)

# ============================================================================
# HEALTH ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "Client is running"}

@app.get("/api/backend/health", tags=["Health"])
async def backend_health_check(service: HealthService = Depends(get_health_service)):
    """Backend health, as reported by GET /health"""
    try:
        return await service.check()
    except ApiError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

# ============================================================================
# SESSION ENDPOINTS
# ============================================================================

def _session_response(session: SessionStore, redirect=None) -> SessionResponse:
    return SessionResponse(
        authenticated=session.is_authenticated,
        is_admin=session.is_admin,
        user=session.user,
        redirect=redirect
    )

@app.get("/api/session", response_model=SessionResponse, tags=["Session"])
async def read_session(session: SessionStore = Depends(get_session_store)):
    return _session_response(session)

@app.post("/api/session/login", response_model=SessionResponse, tags=["Session"])
async def login(request: LoginRequest, session: SessionStore = Depends(get_session_store)):
    page = LoginPage(session, return_to=request.return_to)
    redirect = await page.submit(request.username, request.password)
    if page.field_errors:
        raise HTTPException(status_code=400, detail="; ".join(page.field_errors))
    if redirect is None:
        raise HTTPException(status_code=401, detail=page.error)
    return _session_response(session, redirect)

@app.post("/api/session/register", response_model=SessionResponse, tags=["Session"])
async def register(request: RegisterRequest, session: SessionStore = Depends(get_session_store)):
    page = RegisterPage(session)
    redirect = await page.submit(request.username, request.password, request.confirm_password, request.role)
    if page.field_errors:
        raise HTTPException(status_code=400, detail="; ".join(page.field_errors))
    if redirect is None:
        raise HTTPException(status_code=400, detail=page.error)
    return _session_response(session, redirect)

@app.post("/api/session/logout", response_model=MessageResponse, tags=["Session"])
async def logout(session: SessionStore = Depends(get_session_store)):
    session.logout()
    return MessageResponse(message="Logged out")

# ============================================================================
# SEARCH & HOTEL ENDPOINTS
# ============================================================================

@app.get("/api/search", response_model=SearchResponse, tags=["Hotels"])
async def search_hotels(
    q: str = "",
    page: int = 1,
    sort: SortOption = SortOption.RELEVANCE,
    service: HotelService = Depends(get_hotel_service),
    config: Settings = Depends(get_settings)
):
    """Search hotels, sorted client-side"""
    search_page = SearchPage(service, query=q, page_size=config.page_size)
    search_page.set_page(page)
    search_page.set_sort(sort)
    await search_page.load()
    if search_page.error:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=search_page.error)
    return SearchResponse(
        query=search_page.query,
        page=search_page.page,
        sort_by=search_page.sort_by,
        total_pages=search_page.total_pages,
        show_pagination=search_page.show_pagination,
        hotels=search_page.hotels
    )

def _hotel_page(
    hotel_id: str,
    hotel_service: HotelService,
    reservation_service: ReservationService,
    session: SessionStore
) -> HotelDetailPage:
    return HotelDetailPage(hotel_id, hotel_service, reservation_service, session)

@app.get("/api/hotels/{hotel_id}", response_model=HotelDetailResponse, tags=["Hotels"])
async def get_hotel(
    hotel_id: str,
    check_in: Optional[date] = None,
    check_out: Optional[date] = None,
    hotel_service: HotelService = Depends(get_hotel_service),
    reservation_service: ReservationService = Depends(get_reservation_service),
    session: SessionStore = Depends(get_session_store)
):
    """Hotel detail, with a price preview when dates are given"""
    page = _hotel_page(hotel_id, hotel_service, reservation_service, session)
    hotel = await page.load()
    if page.not_found:
        raise HTTPException(status_code=404, detail={"message": page.error, "back": page.back_path})
    page.booking.select_dates(check_in, check_out)
    return HotelDetailResponse(
        hotel=hotel,
        image=get_hotel_image(hotel.id, hotel.images),
        amenity_labels=page.amenity_labels,
        check_in=page.booking.check_in,
        check_out=page.booking.check_out,
        nights=page.booking.nights,
        total_price=page.total_price,
        formatted_total=format_price(page.total_price) if page.booking.dates_selected else None
    )

@app.post("/api/hotels/{hotel_id}/reservations", response_model=MessageResponse, status_code=201, tags=["Hotels"])
async def book_hotel(
    hotel_id: str,
    request: BookingRequest,
    hotel_service: HotelService = Depends(get_hotel_service),
    reservation_service: ReservationService = Depends(get_reservation_service),
    session: SessionStore = Depends(get_session_store)
):
    """Book a stay at a hotel"""
    page = _hotel_page(hotel_id, hotel_service, reservation_service, session)
    guard(page.open_booking(), session)
    await page.load()
    if page.not_found:
        raise HTTPException(status_code=404, detail={"message": page.error, "back": page.back_path})
    page.booking.select_dates(request.check_in, request.check_out)
    if not await page.submit_booking():
        raise HTTPException(status_code=400, detail=page.notification.message)
    return MessageResponse(message=page.notification.message, severity=page.notification.severity.value)

# ============================================================================
# RESERVATION ENDPOINTS
# ============================================================================

async def _reservations_page(
    service: ReservationService,
    session: SessionStore
) -> MyReservationsPage:
    page = MyReservationsPage(service, session)
    guard(await page.load(), session)
    if page.error:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=page.error)
    return page

@app.get("/api/reservations", response_model=ReservationsResponse, tags=["Reservations"])
async def my_reservations(
    service: ReservationService = Depends(get_reservation_service),
    session: SessionStore = Depends(get_session_store)
):
    """Reservations of the logged-in user"""
    page = await _reservations_page(service, session)
    return ReservationsResponse(reservations=page.rows())

@app.delete("/api/reservations/{reservation_id}", response_model=ReservationsResponse, tags=["Reservations"])
async def cancel_reservation(
    reservation_id: str,
    service: ReservationService = Depends(get_reservation_service),
    session: SessionStore = Depends(get_session_store)
):
    """Cancel one of the logged-in user's reservations"""
    page = await _reservations_page(service, session)
    reservation = page.find(reservation_id)
    if reservation is None:
        raise HTTPException(status_code=404, detail="Reservation not found")
    if not page.request_cancel(reservation):
        raise HTTPException(status_code=400, detail=page.notification.message)
    if not await page.confirm_cancel():
        raise HTTPException(status_code=400, detail=page.notification.message)
    return ReservationsResponse(reservations=page.rows(), notification=page.notification)

# ============================================================================
# ADMIN ENDPOINTS
# ============================================================================

async def _dashboard_page(
    session: SessionStore,
    hotel_service: HotelService,
    auth_service: AuthService,
    admin_service: AdminService,
    config: Settings
) -> DashboardPage:
    page = DashboardPage(session, hotel_service, auth_service, admin_service, fetch_limit=config.admin_fetch_limit)
    guard(await page.load(), session)
    if page.error:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=page.error)
    return page

def _dashboard_response(page: DashboardPage) -> DashboardResponse:
    return DashboardResponse(
        stats=page.stats,
        hotels=page.hotels,
        users=page.users,
        notification=page.notification
    )

@app.get("/api/admin/dashboard", response_model=DashboardResponse, tags=["Admin"])
async def admin_dashboard(
    session: SessionStore = Depends(get_session_store),
    hotel_service: HotelService = Depends(get_hotel_service),
    auth_service: AuthService = Depends(get_auth_service),
    admin_service: AdminService = Depends(get_admin_service),
    config: Settings = Depends(get_settings)
):
    """Hotels, users and counts"""
    page = await _dashboard_page(session, hotel_service, auth_service, admin_service, config)
    return _dashboard_response(page)

async def _delete_from_dashboard(page: DashboardPage, target: DeleteTarget, item_id: str) -> DashboardResponse:
    item = page.find(target, item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"{target.value.capitalize()} not found")
    page.request_delete(target, item)
    if not await page.confirm_delete():
        raise HTTPException(status_code=400, detail=page.notification.message)
    return _dashboard_response(page)

@app.delete("/api/admin/hotels/{hotel_id}", response_model=DashboardResponse, tags=["Admin"])
async def delete_hotel(
    hotel_id: str,
    session: SessionStore = Depends(get_session_store),
    hotel_service: HotelService = Depends(get_hotel_service),
    auth_service: AuthService = Depends(get_auth_service),
    admin_service: AdminService = Depends(get_admin_service),
    config: Settings = Depends(get_settings)
):
    """Delete a hotel listed on the dashboard"""
    page = await _dashboard_page(session, hotel_service, auth_service, admin_service, config)
    return await _delete_from_dashboard(page, DeleteTarget.HOTEL, hotel_id)

@app.delete("/api/admin/users/{user_id}", response_model=DashboardResponse, tags=["Admin"])
async def delete_user(
    user_id: str,
    session: SessionStore = Depends(get_session_store),
    hotel_service: HotelService = Depends(get_hotel_service),
    auth_service: AuthService = Depends(get_auth_service),
    admin_service: AdminService = Depends(get_admin_service),
    config: Settings = Depends(get_settings)
):
    """Delete a user listed on the dashboard"""
    page = await _dashboard_page(session, hotel_service, auth_service, admin_service, config)
    return await _delete_from_dashboard(page, DeleteTarget.USER, user_id)

def _hotel_form_page(
    session: SessionStore,
    hotel_service: HotelService,
    admin_service: AdminService,
    config: Settings,
    hotel_id: Optional[str] = None
) -> HotelFormPage:
    return HotelFormPage(session, hotel_service, admin_service, hotel_id=hotel_id, redirect_delay=config.redirect_delay)

@app.get("/api/admin/hotels/{hotel_id}/form", response_model=HotelFormResponse, tags=["Admin"])
async def edit_hotel_form(
    hotel_id: str,
    session: SessionStore = Depends(get_session_store),
    hotel_service: HotelService = Depends(get_hotel_service),
    admin_service: AdminService = Depends(get_admin_service),
    config: Settings = Depends(get_settings)
):
    """Form pre-filled with an existing hotel"""
    page = _hotel_form_page(session, hotel_service, admin_service, config, hotel_id)
    guard(await page.load(), session)
    if page.error:
        raise HTTPException(status_code=404, detail=page.error)
    return HotelFormResponse(hotel_id=hotel_id, editing=page.is_editing, form=page.form)

async def _save_hotel(page: HotelFormPage, form: HotelFormData) -> HotelSavedResponse:
    guard(page.access_redirect(), page.session)
    page.form = form
    redirect = await page.submit()
    if page.field_errors:
        raise HTTPException(status_code=400, detail="; ".join(page.field_errors))
    if redirect is None:
        raise HTTPException(status_code=400, detail=page.error)
    return HotelSavedResponse(notification=page.notification, redirect=redirect)

@app.post("/api/admin/hotels", response_model=HotelSavedResponse, status_code=201, tags=["Admin"])
async def create_hotel(
    form: HotelFormData,
    session: SessionStore = Depends(get_session_store),
    hotel_service: HotelService = Depends(get_hotel_service),
    admin_service: AdminService = Depends(get_admin_service),
    config: Settings = Depends(get_settings)
):
    """Create a hotel from form input"""
    page = _hotel_form_page(session, hotel_service, admin_service, config)
    return await _save_hotel(page, form)

@app.put("/api/admin/hotels/{hotel_id}", response_model=HotelSavedResponse, tags=["Admin"])
async def update_hotel(
    hotel_id: str,
    form: HotelFormData,
    session: SessionStore = Depends(get_session_store),
    hotel_service: HotelService = Depends(get_hotel_service),
    admin_service: AdminService = Depends(get_admin_service),
    config: Settings = Depends(get_settings)
):
    """Update a hotel from form input"""
    page = _hotel_form_page(session, hotel_service, admin_service, config, hotel_id)
    return await _save_hotel(page, form)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
