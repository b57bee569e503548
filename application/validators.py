"""Form input validation.

Each validator returns a ``ValidationResult``; optional fields are valid
when blank.
"""
import re
from datetime import date
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6
# Accounts may predate the sign-up rules; login only checks the basics
MIN_LOGIN_PASSWORD_LENGTH = 4
MIN_RATING = 0
MAX_RATING = 5

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[\d\s\-+()]+$")


class ValidationResult(BaseModel):
    is_valid: bool
    error: Optional[str] = None


class CombinedValidation(BaseModel):
    is_valid: bool
    errors: List[str] = []


VALID = ValidationResult(is_valid=True)


def _invalid(error: str) -> ValidationResult:
    return ValidationResult(is_valid=False, error=error)


def _blank(value) -> bool:
    return value is None or str(value).strip() == ""


def _number(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # NaN
    return None if number != number else number


def validate_username(username: Optional[str]) -> ValidationResult:
    if _blank(username):
        return _invalid("Username is required")
    if len(username) < MIN_USERNAME_LENGTH:
        return _invalid(f"Username must be at least {MIN_USERNAME_LENGTH} characters")
    if not USERNAME_PATTERN.match(username):
        return _invalid("Username can only contain letters, numbers, and underscores")
    return VALID


def validate_password(password: Optional[str]) -> ValidationResult:
    if _blank(password):
        return _invalid("Password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        return _invalid(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return VALID


def validate_email(email: Optional[str]) -> ValidationResult:
    if _blank(email):
        return VALID
    if not EMAIL_PATTERN.match(email):
        return _invalid("Please enter a valid email address")
    return VALID


def validate_phone(phone: Optional[str]) -> ValidationResult:
    if _blank(phone):
        return VALID
    if not PHONE_PATTERN.match(phone):
        return _invalid("Please enter a valid phone number")
    return VALID


def validate_login_username(username: Optional[str]) -> ValidationResult:
    if _blank(username):
        return _invalid("Username is required")
    if len(username) < MIN_USERNAME_LENGTH:
        return _invalid(f"Username must be at least {MIN_USERNAME_LENGTH} characters")
    return VALID


def validate_login_password(password: Optional[str]) -> ValidationResult:
    if _blank(password):
        return _invalid("Password is required")
    if len(password) < MIN_LOGIN_PASSWORD_LENGTH:
        return _invalid(f"Password must be at least {MIN_LOGIN_PASSWORD_LENGTH} characters")
    return VALID


def validate_rating(rating) -> ValidationResult:
    value = _number(rating)
    if value is None:
        return _invalid("Rating must be a number")
    if value < MIN_RATING or value > MAX_RATING:
        return _invalid(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return VALID


def validate_price(price) -> ValidationResult:
    value = _number(price)
    if value is None:
        return _invalid("Price must be a number")
    if value < 0:
        return _invalid("Price cannot be negative")
    return VALID


def validate_room_count(rooms) -> ValidationResult:
    value = _number(rooms)
    if value is None:
        return _invalid("Available rooms must be a number")
    if value < 0:
        return _invalid("Available rooms cannot be negative")
    return VALID


def validate_date_range(check_in, check_out, today: Optional[date] = None) -> ValidationResult:
    """Reservation dates: both present, not in the past, check-out after check-in"""
    if _blank(check_in) or _blank(check_out):
        return _invalid("Both check-in and check-out dates are required")
    try:
        check_in_day = check_in if isinstance(check_in, date) else date.fromisoformat(str(check_in)[:10])
        check_out_day = check_out if isinstance(check_out, date) else date.fromisoformat(str(check_out)[:10])
    except ValueError:
        return _invalid("Please enter valid dates")

    if check_in_day < (today or date.today()):
        return _invalid("Check-in date cannot be in the past")
    if check_out_day <= check_in_day:
        return _invalid("Check-out date must be after check-in date")
    return VALID


def validate_url(url: Optional[str]) -> ValidationResult:
    if _blank(url):
        return VALID
    parsed = urlparse(url.strip())
    if not parsed.scheme or not (parsed.netloc or parsed.path):
        return _invalid("Please enter a valid URL")
    return VALID


def validate_required(value, field_name: str) -> ValidationResult:
    if value is None or value == "":
        return _invalid(f"{field_name} is required")
    return VALID


def combine_validations(*validations: ValidationResult) -> CombinedValidation:
    errors = [v.error for v in validations if not v.is_valid and v.error]
    return CombinedValidation(is_valid=not errors, errors=errors)
