from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings

from fittrack.services.streak_calculator import BackdatedPolicy


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql://fittrack_user:fittrack_password@db:5432/fittrack_db"
    SECRET_KEY: str = "SECRET_KEY_FOR_FITTRACK"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    # Пересоздавать таблицы на старте только в локальной разработке
    RESET_DATABASE: bool = False
    SQL_ECHO: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

    # Календарные дни для стрика считаются в этой зоне
    TIMEZONE: str = "UTC"
    BACKDATED_STREAK_POLICY: BackdatedPolicy = BackdatedPolicy.ignore
    RECOMPUTE_STREAK_ON_DELETE: bool = False
    STREAK_UPDATE_RETRIES: int = 3
    RECENT_WORKOUTS_LIMIT: int = 5

    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-flash-latest"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    AI_TIMEOUT_SECONDS: float = 30.0
    AI_TEMPERATURE: float = 0.7
    AI_MAX_OUTPUT_TOKENS: int = 1000

    @field_validator("TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"


settings = Settings()
