import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
DEBUG = _get_bool(os.getenv("DEBUG"), default=False)
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "")
STORE_TIMEOUT_SECONDS = float(os.getenv("STORE_TIMEOUT_SECONDS", "5"))

CORS_ALLOWED_ORIGINS = _get_list(
    os.getenv("CORS_ALLOWED_ORIGINS"),
    default=["http://localhost:8081", "http://localhost:19006"],
)

# Slot grid and booking policy
SLOT_GRANULARITY_MINUTES = int(os.getenv("SLOT_GRANULARITY_MINUTES", "30"))
BOOKING_HORIZON_DAYS = int(os.getenv("BOOKING_HORIZON_DAYS", "30"))
MIN_BUSY_MINUTES = int(os.getenv("MIN_BUSY_MINUTES", "15"))
CANCELLATION_NOTICE_HOURS = int(os.getenv("CANCELLATION_NOTICE_HOURS", "24"))

# whole_day: an active busy override blocks every slot of each covered day.
# intersect: on the override's last day only slots before busy_until are dropped.
BUSY_OVERRIDE_MODE = os.getenv("BUSY_OVERRIDE_MODE", "whole_day").strip().lower()

SUPPORTED_GRANULARITIES = (15, 30, 60)
SUPPORTED_BUSY_OVERRIDE_MODES = ("whole_day", "intersect")


def validate_runtime_config() -> None:
    if not DATABASE_URL:
        raise RuntimeError("DATABASE_URL must be set.")
    if SLOT_GRANULARITY_MINUTES not in SUPPORTED_GRANULARITIES:
        raise RuntimeError(
            f"SLOT_GRANULARITY_MINUTES must be one of {SUPPORTED_GRANULARITIES}, got {SLOT_GRANULARITY_MINUTES}."
        )
    if BUSY_OVERRIDE_MODE not in SUPPORTED_BUSY_OVERRIDE_MODES:
        raise RuntimeError(
            f"BUSY_OVERRIDE_MODE must be one of {SUPPORTED_BUSY_OVERRIDE_MODES}, got {BUSY_OVERRIDE_MODE!r}."
        )
    if BOOKING_HORIZON_DAYS < 1:
        raise RuntimeError("BOOKING_HORIZON_DAYS must be at least 1.")
    if STORE_TIMEOUT_SECONDS <= 0:
        raise RuntimeError("STORE_TIMEOUT_SECONDS must be positive.")
