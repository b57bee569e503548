"""Domain Value Objects"""
from pydantic import BaseModel, field_validator
from datetime import date
from typing import Optional

from domain.enums import Severity, StatusLabel


class DateRange(BaseModel):
    """Value Object for a stay's date range"""
    check_in: date
    check_out: date

    @field_validator('check_out')
    @classmethod
    def check_out_after_check_in(cls, v, info):
        if 'check_in' in info.data and v <= info.data['check_in']:
            raise ValueError('Check-out date must be after check-in date')
        return v

    def nights(self) -> int:
        """Calculate number of nights"""
        return (self.check_out - self.check_in).days

    class Config:
        frozen = True


class ReservationStatus(BaseModel):
    """Display status of a reservation derived from its dates"""
    label: StatusLabel
    severity: Severity
    cancellable: bool

    class Config:
        frozen = True


class Notification(BaseModel):
    """Toast-style message shown by a page"""
    message: str
    severity: Severity = Severity.SUCCESS

    class Config:
        frozen = True


class Redirect(BaseModel):
    """Navigation requested by a page, with an optional path to come back to"""
    path: str
    return_to: Optional[str] = None
    delay: float = 0

    class Config:
        frozen = True
