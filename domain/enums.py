"""Domain Enums"""
from enum import Enum


class UserRole(str, Enum):
    CUSTOMER = "cliente"
    ADMINISTRATOR = "administrador"


class SortOption(str, Enum):
    RELEVANCE = "relevance"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    RATING = "rating"


class StatusLabel(str, Enum):
    COMPLETED = "Completed"
    IN_PROGRESS = "In Progress"
    UPCOMING = "Upcoming"
    PENDING = "Pending"


class Severity(str, Enum):
    DEFAULT = "default"
    PRIMARY = "primary"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class StorageKey(str, Enum):
    TOKEN = "token"
    USER = "user"
    THEME = "theme"


class DeleteTarget(str, Enum):
    HOTEL = "hotel"
    USER = "user"
