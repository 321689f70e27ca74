from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class NotifierAdapter(Enum):
    LOG = "log"
    EMAIL_API = "email_api"


class BookingConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BOOKING_", env_file=".env", extra="ignore")

    storage_timeout_seconds: float = 5.0
    suggestion_limit: int = 10
    revalidate_reschedule: bool = True


class DirectoryConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DIRECTORY_", env_file=".env", extra="ignore")

    catalog_path: Path | None = None
    nearest_default_limit: int = 10
    emergency_dispatch_count: int = 4


class EmailConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="EMAIL_", env_file=".env", extra="ignore")

    api_url: str = "https://api.resend.com/emails"
    api_key: str = ""
    from_address: str = "no-reply@maternalhub.rw"
    from_name: str = "Maternal Health Platform"
    timeout_seconds: float = 10.0


class NotificationConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="NOTIFY_", env_file=".env", extra="ignore")

    adapter: NotifierAdapter = NotifierAdapter.LOG
    max_attempts: int = 3
    retry_delay_seconds: float = 1.0


class ReminderConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="REMINDER_", env_file=".env", extra="ignore")

    interval_seconds: float = 3600
    window_start_hours: float = 23
    window_end_hours: float = 25


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    clinic_timezone: str = "Africa/Kigali"
    booking: BookingConfig = Field(default_factory=lambda: BookingConfig())
    directory: DirectoryConfig = Field(default_factory=lambda: DirectoryConfig())
    email: EmailConfig = Field(default_factory=lambda: EmailConfig())
    notifications: NotificationConfig = Field(default_factory=lambda: NotificationConfig())
    reminders: ReminderConfig = Field(default_factory=lambda: ReminderConfig())
