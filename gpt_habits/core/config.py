# gpt_habits/core/config.py
from __future__ import annotations

from pathlib import Path
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


ROOT_DIR = Path(__file__).resolve().parents[2]  # repo root
ENV_FILE = ROOT_DIR / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # App
    APP_NAME: str = "GPT Habits API"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # Admin gate (passphrase -> JWT)
    ADMIN_PASSPHRASE: str = "change-me"
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 240

    # CORS (CORS_ORIGINS=https://gpt-habits.example.com,http://localhost:3000)
    CORS_ORIGINS: str = ""

    # DB URLs (acepta cualquiera de las dos)
    DATABASE_URL: str | None = None
    SQLALCHEMY_DATABASE_URI: str | None = None

    # Live quiz
    LIVE_TIMER_SECONDS: int = 30
    LIVE_AUTO_ADVANCE: bool = True
    LIVE_AUTO_ADVANCE_POLL_SECONDS: float = 1.0
    LIVE_AUTO_ADVANCE_DELAY_SECONDS: int = 0

    # Dashboard
    STATS_TIMEZONE: str = "UTC"

    @property
    def cors_list(self) -> list[str]:
        if not self.CORS_ORIGINS:
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def db_url(self) -> str:
        """
        URL unificada para SQLAlchemy. Acepta DATABASE_URL o SQLALCHEMY_DATABASE_URI
        y cae a un SQLite local si no hay ninguna.
        Fuerza sslmode=require para Supabase si faltara.
        """
        url = (self.DATABASE_URL or self.SQLALCHEMY_DATABASE_URI or "").strip()
        if not url:
            return f"sqlite:///{ROOT_DIR / 'gpt_habits.db'}"
        if ("supabase.co" in url or "supabase.com" in url) and "sslmode=" not in url:
            sep = "&" if "?" in url else "?"
            url = f"{url}{sep}sslmode=require"
        return url


@lru_cache
def get_settings() -> Settings:
    return Settings()


# from gpt_habits.core.config import settings
settings = get_settings()
