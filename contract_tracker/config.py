"""
Contract Tracker — Configuration via environment variables.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """All settings read from env / .env file."""

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./contracts.db",
        description="Async SQLAlchemy DB URL",
    )

    # Contract rules
    expiring_window_days: int = Field(
        default=30, description="Days ahead of expiry a contract counts as expiring"
    )

    # Default admin (seeded once at startup)
    default_admin_email: str = Field(default="admin@example.com")
    default_admin_name: str = Field(default="Administrator")

    # Attachments
    upload_dir: str = Field(default="./uploads")
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, description="10 MB")

    # Reminders (defaults; PUT /settings/reminder overrides them at runtime)
    reminder_days: list[int] = Field(default=[30, 7, 1])
    reminder_email_enabled: bool = Field(default=False)
    reminder_repeat: bool = Field(
        default=True, description="Keep reminding about expired, unprocessed contracts"
    )
    reminder_interval_seconds: int = Field(
        default=24 * 60 * 60, description="Seconds between reminder runs"
    )

    # Email / SMTP
    smtp_host: str = Field(default="", description="SMTP host; blank disables email")
    smtp_port: int = Field(default=587)
    smtp_user: str = Field(default="")
    smtp_password: str = Field(default="")
    smtp_from: str = Field(default="", description="From address (falls back to SMTP_USER)")

    @property
    def smtp_sender(self) -> str:
        """Address mail is sent from."""
        return self.smtp_from or self.smtp_user

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_sender)

    # CORS
    cors_origins: str = Field(
        default="*", description="Comma-separated list of allowed origins"
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
