from functools import lru_cache
import json
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_DIR = Path(__file__).resolve().parents[2]
BACKEND_ENV_FILE = BACKEND_DIR / ".env"

DEFAULT_WORKING_DAYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(env_file=str(BACKEND_ENV_FILE), env_file_encoding="utf-8")

    project_name: str = "Timetabling API"
    api_prefix: str = "/api"
    environment: str = "development"
    log_level: str | None = None

    database_url: str = f"sqlite+pysqlite:///{BACKEND_DIR / 'timetabling.db'}"

    # Generation defaults, applied when a request omits its constraints.
    schedule_day_start: str = "08:00"
    schedule_day_end: str = "15:00"
    schedule_break_minutes: int = 15
    schedule_max_periods_per_day: int = 8
    schedule_working_days: list[str] = DEFAULT_WORKING_DAYS

    # Utilization denominator (days x periods).
    statistics_days_per_week: int = 5
    statistics_periods_per_day: int = 8

    generation_serialize_per_class: bool = True

    max_request_size_bytes: int = 2 * 1024 * 1024
    security_enable_hsts: bool = False
    security_hsts_max_age_seconds: int = 31536000

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @field_validator("cors_origins", "schedule_working_days", mode="before")
    @classmethod
    def split_list_values(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                try:
                    parsed = json.loads(stripped)
                    if isinstance(parsed, list):
                        return [str(item).strip() for item in parsed if str(item).strip()]
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("schedule_working_days")
    @classmethod
    def normalize_working_days(cls, value: list[str]) -> list[str]:
        return [item.lower() for item in value]


@lru_cache
def get_settings() -> Settings:
    return Settings()
