from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./elearning.db"
    NODE_ENV: str = "development"

    # Token signing - required, there is no safe default
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_HOURS: int = 24
    BCRYPT_ROUNDS: int = 12

    # CORS configuration - comma-separated list of allowed origins
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:3001"

    # Uploaded lecture videos and notes
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 500 * 1024 * 1024

    # "reset" starts the streak over on a second watch the same day, "preserve" leaves it alone
    SAME_DAY_WATCH_POLICY: Literal["reset", "preserve"] = "reset"

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def cors_origin_list(self):
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
