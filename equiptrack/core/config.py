from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Any SQLAlchemy async URL. SQLite is fine for a single-process deployment.
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/equiptrack.db"

    SECRET_KEY: str = "equiptrack-dev-secret"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    SUPER_ADMIN_CONTACT: str | None = None
    SUPER_ADMIN_PASSWORD: str | None = None
    SUPER_ADMIN_NAME: str | None = "System Administrator"
    ENV: str = "dev"  # "dev" or "prod"

    # --- PUSH NOTIFICATIONS ---
    # When unset, notifications are only logged.
    PUSH_GATEWAY_URL: str | None = None
    PUSH_GATEWAY_TIMEOUT: float = 5.0

    CORS_ORIGINS: str = "*"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
