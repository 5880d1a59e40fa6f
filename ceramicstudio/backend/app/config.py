from functools import lru_cache
import os
from pydantic import BaseModel, Field


class Settings(BaseModel):
    env: str = Field(default="dev", alias="ENV")
    timezone: str = Field(default="Europe/Berlin", alias="TIMEZONE")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    postgres_db: str = Field(default="ceramics", alias="POSTGRES_DB")
    postgres_user: str = Field(default="ceramics", alias="POSTGRES_USER")
    postgres_password: str = Field(default="ceramics", alias="POSTGRES_PASSWORD")
    postgres_host: str = Field(default="localhost", alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, alias="POSTGRES_PORT")
    database_url: str = Field(default="", alias="DATABASE_URL")

    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")

    calendar_max_workers: int = Field(default=4, alias="CALENDAR_MAX_WORKERS")

    waitlist_horizon_days: int = Field(default=90, alias="WAITLIST_HORIZON_DAYS")
    waitlist_process_interval_min: int = Field(
        default=15, alias="WAITLIST_PROCESS_INTERVAL_MIN"
    )
    scheduler_enabled: bool = Field(default=False, alias="SCHEDULER_ENABLED")

    notification_webhook_url: str = Field(default="", alias="NOTIFICATION_WEBHOOK_URL")

    class Config:
        populate_by_name = True

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(**os.environ)
