# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Supabase env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon / public key)

    Both are optional at load time: a missing value does not crash the
    app, the auth middleware redirects everything to /login instead and
    logs the problem.
    """

    PROJECT_NAME: str = "Restaurant POS"
    API_V1_STR: str = "/api/v1"

    # Supabase config
    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None

    # Tables queried through PostgREST
    USERS_TABLE: str = "users"
    ITEMS_TABLE: str = "items"

    # Session cookies written by the login page
    ACCESS_TOKEN_COOKIE: str = "sb-access-token"
    REFRESH_TOKEN_COOKIE: str = "sb-refresh-token"
    COOKIE_SECURE: bool = True

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def supabase_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_KEY)


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
