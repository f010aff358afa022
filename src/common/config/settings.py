"""Application settings and environment variables."""

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


class Settings:
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_DATABASE: str = os.getenv("DB_NAME", "commerce_db")
    DB_USER: str = os.getenv("DB_USER", "user")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "password")

    # Comma separated list of subscriber endpoints
    WEBHOOK_SUBSCRIBER_URLS: list[str] = [
        url.strip() for url in os.getenv("WEBHOOK_SUBSCRIBER_URLS", "").split(",") if url.strip()
    ]
    WEBHOOK_SECRET: Optional[str] = os.getenv("WEBHOOK_SECRET")
    WEBHOOK_TIMEOUT_SECONDS: int = int(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "10"))
    WEBHOOK_MAX_WORKERS: int = int(os.getenv("WEBHOOK_MAX_WORKERS", "4"))

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")  # INFO, DEBUG, WARNING, ERROR, CRITICAL
    WEBHOOK_LOG_LEVEL: str = os.getenv("WEBHOOK_LOG_LEVEL", os.getenv("LOG_LEVEL", "INFO"))


settings = Settings()
