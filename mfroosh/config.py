"""Central configuration for the enquiry service.

Settings are read once at startup and passed into the handler; tests build
their own `Settings(...)` directly.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env first, then .env.local on top so local secrets win during development
load_dotenv(find_dotenv())
load_dotenv(find_dotenv(".env.local"), override=True)

PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))

DEFAULT_SENDER_EMAIL = "noreply@mfrooshtrade.com"
DEFAULT_RECIPIENT_EMAIL = "info@mfrooshtrade.com"
RESEND_API_URL = "https://api.resend.com/emails"


class Settings(BaseSettings):
    """Runtime settings for the API and the delivery providers.

    Values are loaded from environment variables and optional .env files.
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    APP_TITLE: str = "Mfroosh Trade Enquiry API"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Primary provider (transactional email API)
    RESEND_API_KEY: Optional[str] = None
    RESEND_API_URL: str = RESEND_API_URL

    # Fallback provider (generic HTTP email gateway)
    EMAIL_SERVICE_URL: Optional[str] = None
    EMAIL_SERVICE_KEY: Optional[str] = None

    # Addressing
    COMPANY_EMAIL: Optional[str] = None
    DEFAULT_SENDER_EMAIL: str = DEFAULT_SENDER_EMAIL
    DEFAULT_RECIPIENT_EMAIL: str = DEFAULT_RECIPIENT_EMAIL

    # None means outbound calls wait as long as the provider takes
    DELIVERY_TIMEOUT_SECONDS: Optional[float] = None

    PING_MESSAGE: str = "ping"
    CORS_ORIGINS: List[str] = ["*"]

    @property
    def sender_email(self) -> str:
        return self.COMPANY_EMAIL or self.DEFAULT_SENDER_EMAIL

    @property
    def recipient_email(self) -> str:
        return self.COMPANY_EMAIL or self.DEFAULT_RECIPIENT_EMAIL

    def describe(self) -> dict:
        """Summarise delivery config for startup logs without leaking secrets."""
        return {
            "RESEND_API_KEY": "SET" if self.RESEND_API_KEY else "NOT SET",
            "EMAIL_SERVICE_URL": self.EMAIL_SERVICE_URL or "NOT SET",
            "EMAIL_SERVICE_KEY": "SET" if self.EMAIL_SERVICE_KEY else "NOT SET",
            "COMPANY_EMAIL": self.COMPANY_EMAIL or "NOT SET",
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
