import logging
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    REDIS_URL: str = "redis://localhost:6379/0"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    TRESTLE_API_KEY: str = ""
    TRESTLE_BASE_URL: str = "https://api.trestleiq.com"

    HTTP_CONNECT_TIMEOUT_S: float = 3.0
    HTTP_READ_TIMEOUT_S: float = 30.0

    class Config:
        env_file = ".env"  # relative path from src/trestleflow to project root
        env_file_encoding = "utf-8"

settings = Settings()
REDIS_URL = settings.REDIS_URL
BROKER_URL = REDIS_URL
RESULT_BACKEND = REDIS_URL


def configure_logging(level: Optional[str] = None):
    """Apply LOG_LEVEL to the root logger. Safe to call more than once."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
