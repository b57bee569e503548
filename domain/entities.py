"""Domain Entities - Hotels and Reservations"""
from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import List, Optional

DEFAULT_CHECK_IN_TIME = "15:00"
DEFAULT_CHECK_OUT_TIME = "11:00"


def parse_day(value) -> date:
    """Accept a date, a datetime or an ISO string and keep only the day.

    The backend serializes reservation dates as RFC 3339 timestamps
    (``2024-06-01T00:00:00Z``) while the client sends plain days.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"Invalid date: {value!r}")


class Hotel(BaseModel):
    """Hotel listing as exposed by the hotels and search APIs"""

    # Identity
    id: Optional[str] = None
    name: str = ""
    description: str = ""

    # Address
    address: str = ""
    city: str = ""
    state: str = ""
    country: str = ""

    # Contact
    phone: str = ""
    email: str = ""

    # Pricing and capacity
    price_per_night: float = 0
    rating: float = 0
    available_rooms: int = Field(default=0, alias="avaiable_rooms")

    check_in_time: str = DEFAULT_CHECK_IN_TIME
    check_out_time: str = DEFAULT_CHECK_OUT_TIME

    amenities: List[str] = []
    images: List[str] = []

    class Config:
        from_attributes = True
        populate_by_name = True

    @field_validator("amenities", "images", mode="before")
    @classmethod
    def null_to_empty(cls, v):
        return v or []

    @field_validator("check_in_time", "check_out_time", mode="before")
    @classmethod
    def clock_time(cls, v, info):
        # Times may arrive as full timestamps; keep HH:MM
        if not v:
            return DEFAULT_CHECK_IN_TIME if info.field_name == "check_in_time" else DEFAULT_CHECK_OUT_TIME
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[1][:5]
        return v

    def to_payload(self) -> dict:
        """Request body for the admin create/update endpoints"""
        return self.model_dump(by_alias=True, exclude={"id"})


class Reservation(BaseModel):
    """Reservation of a hotel stay by a user"""
    id: str
    hotel_id: str
    hotel_name: str = "Hotel"
    user_id: Optional[str] = None
    check_in: date
    check_out: date

    class Config:
        from_attributes = True

    @field_validator("check_in", "check_out", mode="before")
    @classmethod
    def day_only(cls, v):
        return parse_day(v)

    @field_validator("user_id", mode="before")
    @classmethod
    def user_id_as_str(cls, v):
        return None if v is None else str(v)

    @field_validator("hotel_name", mode="before")
    @classmethod
    def default_hotel_name(cls, v):
        return v or "Hotel"
