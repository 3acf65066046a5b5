from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent  # project root
ENV_PATH = BASE_DIR / ".env"

load_dotenv(dotenv_path=ENV_PATH)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
    )

    DATABASE_URL: str

    # One signing secret pair per principal kind; tokens never cross roles.
    USER_ACCESS_TOKEN_SECRET: str
    USER_REFRESH_TOKEN_SECRET: str
    ADMIN_ACCESS_TOKEN_SECRET: str
    ADMIN_REFRESH_TOKEN_SECRET: str
    VENTURE_ACCESS_TOKEN_SECRET: str
    VENTURE_REFRESH_TOKEN_SECRET: str

    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    JWT_ALG: str = "HS256"

    UPLOAD_DIR: str = "uploads"
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    COOKIE_SECURE: bool = True

    # The reject endpoint historically had no guard; keep it switchable.
    COUPON_REJECT_REQUIRES_ADMIN: bool = True

    def access_secret(self, kind: str) -> str:
        return getattr(self, f"{kind.upper()}_ACCESS_TOKEN_SECRET")

    def refresh_secret(self, kind: str) -> str:
        return getattr(self, f"{kind.upper()}_REFRESH_TOKEN_SECRET")


def get_settings() -> Settings:
    return Settings()
