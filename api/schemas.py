"""API Schemas - Request and Response DTOs for the page endpoints"""
from pydantic import BaseModel, Field
from datetime import date
from typing import List, Optional

from domain.auth import User
from domain.entities import Hotel
from domain.enums import SortOption, UserRole
from domain.value_objects import Notification, Redirect
from application.pages import DashboardStats, HotelFormData, ReservationRow


# ============================================================================
# SESSION SCHEMAS
# ============================================================================

class LoginRequest(BaseModel):
    """Login request DTO"""
    username: str = ""
    password: str = ""
    return_to: Optional[str] = None


class RegisterRequest(BaseModel):
    """Register request DTO"""
    username: str = ""
    password: str = ""
    confirm_password: str = ""
    role: UserRole = UserRole.CUSTOMER


class SessionResponse(BaseModel):
    """Current session DTO"""
    authenticated: bool
    is_admin: bool
    user: Optional[User] = None
    redirect: Optional[Redirect] = None


# ============================================================================
# SEARCH / HOTEL SCHEMAS
# ============================================================================

class SearchResponse(BaseModel):
    """Search page DTO"""
    query: str
    page: int
    sort_by: SortOption
    total_pages: int
    show_pagination: bool
    hotels: List[Hotel]


class HotelDetailResponse(BaseModel):
    """Hotel detail page DTO"""
    hotel: Hotel
    image: str
    amenity_labels: List[str]
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    nights: int = 0
    total_price: float = 0
    formatted_total: Optional[str] = None


class BookingRequest(BaseModel):
    """Booking dialog submission DTO"""
    check_in: Optional[date] = None
    check_out: Optional[date] = None


# ============================================================================
# RESERVATION SCHEMAS
# ============================================================================

class ReservationsResponse(BaseModel):
    """My reservations page DTO"""
    reservations: List[ReservationRow]
    notification: Optional[Notification] = None


# ============================================================================
# ADMIN SCHEMAS
# ============================================================================

class DashboardResponse(BaseModel):
    """Admin dashboard DTO"""
    stats: DashboardStats
    hotels: List[Hotel]
    users: List[User]
    notification: Optional[Notification] = None


class HotelFormResponse(BaseModel):
    """Admin hotel form DTO"""
    hotel_id: Optional[str] = None
    editing: bool
    form: HotelFormData


class HotelSavedResponse(BaseModel):
    """Admin hotel form submission DTO"""
    notification: Optional[Notification] = None
    redirect: Optional[Redirect] = None


class MessageResponse(BaseModel):
    """Generic message DTO"""
    message: str
    severity: str = Field(default="success")
