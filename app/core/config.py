from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "LabTrack API"
    # Comma-separated origins for CORS (e.g. https://labtrack.school.edu). If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""

    DATABASE_URL: str

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v

    # Identity provider tokens (bearer JWT). Subject claim is the IdP user id.
    AUTH_SECRET_KEY: str = ""
    AUTH_ALGORITHM: str = "HS256"
    AUTH_AUDIENCE: str = ""
    AUTH_ISSUER: str = ""

    # Identity provider webhook (Svix-style "whsec_<base64>" secret)
    WEBHOOK_SIGNING_SECRET: str = ""

    # IdP subject promoted to admin by app.seed (bootstrap only)
    SEED_ADMIN_EXTERNAL_ID: str = ""

    # Audit log store
    LOG_LEVEL: str = "info"  # debug|info|warn|error
    LOG_MAX_ENTRIES: int = 1000

    @field_validator("LOG_LEVEL", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        v = (v or "info").strip().lower()
        if v == "warning":
            return "warn"
        if v not in ("debug", "info", "warn", "error"):
            raise ValueError("LOG_LEVEL must be one of debug, info, warn, error")
        return v


settings = Settings()
