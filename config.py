"""Client configuration, read from the environment"""
import os
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_API_URL = "http://localhost"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_PAGE_SIZE = 12
ADMIN_FETCH_LIMIT = 100
REDIRECT_DELAY_SECONDS = 1.5


class Settings(BaseModel):
    """Settings for the backend connection and page behaviour"""
    api_url: str = DEFAULT_API_URL
    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    admin_fetch_limit: int = Field(default=ADMIN_FETCH_LIMIT, ge=1)
    redirect_delay: float = Field(default=REDIRECT_DELAY_SECONDS, ge=0)
    storage_path: Optional[str] = None

    class Config:
        frozen = True


def load_settings(environ=None) -> Settings:
    """Build Settings from HOTEL_* environment variables"""
    env = os.environ if environ is None else environ
    values = {
        "api_url": env.get("HOTEL_API_URL"),
        "timeout": env.get("HOTEL_API_TIMEOUT"),
        "page_size": env.get("HOTEL_PAGE_SIZE"),
        "admin_fetch_limit": env.get("HOTEL_ADMIN_FETCH_LIMIT"),
        "redirect_delay": env.get("HOTEL_REDIRECT_DELAY"),
        "storage_path": env.get("HOTEL_STORAGE_PATH") or None,
    }
    return Settings(**{k: v for k, v in values.items() if v is not None})
