from pydantic_settings import BaseSettings
from pydantic import Field

class Settings(BaseSettings):
    app_name: str = "SchoolSafe API"
    app_env: str = Field("dev", alias="APP_ENV")
    secret_key: str = Field("change-me", alias="SECRET_KEY")
    access_token_expire_minutes: int = Field(60 * 24 * 30, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")

    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(587, alias="SMTP_PORT")
    smtp_user: str | None = Field(default=None, alias="SMTP_USER")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    mail_from: str = Field("SchoolSafe Alerts <alerts@schoolsafe.local>", alias="MAIL_FROM")

    rate_limit_window_seconds: int = Field(60, alias="RATE_LIMIT_WINDOW_SECONDS")
    rate_limit_max_calls: int = Field(30, alias="RATE_LIMIT_MAX_CALLS")

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() in ("prod", "production")

settings = Settings()
