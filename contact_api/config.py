from functools import lru_cache
from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=True)
    APP_TITLE: str = "Whittico's Collision API"

    # "email" | "sheets"
    CONTACT_SINK: str = "email"

    # Amazon SES
    SES_REGION: str = "us-east-1"
    MAIL_SENDER: Optional[str] = None   # verified SES identity; unset = email not configured
    MAIL_SENDER_NAME: str = "Whittico Website"
    MAIL_RECIPIENT: str = "info@whitticoscollision.co"
    MAIL_FALLBACK_REPLY_TO: str = "info@whitticoscollision.co"
    MAIL_SUBJECT_PREFIX: str = "[Whittico Web]"

    # Google Sheets (service account)
    SPREADSHEET_ID: Optional[str] = None
    GOOGLE_SERVICE_ACCOUNT_EMAIL: Optional[str] = None
    GOOGLE_PRIVATE_KEY: Optional[str] = None  # "\n" escaped, as pasted into env dashboards
    SHEET_RANGE: str = "Sheet1!A:M"

    # Amazon S3 photo storage
    AWS_REGION: str = "us-east-2"
    MEDIA_BUCKET: str = ""
    MEDIA_PREFIX: str = "contact-photos"
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None

    # "auto" (S3 if configured, else local disk) | "inline" (data URLs)
    PHOTO_STORAGE: str = "auto"
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"

    RATE_LIMIT_WINDOW_MS: int = 60_000
    RATE_LIMIT_MAX: int = 5

    CORS_ORIGINS: List[AnyHttpUrl] = [
        "http://localhost:3000",
        "https://whitticoscollision.co",
    ]

    @property
    def email_configured(self) -> bool:
        return bool(self.MAIL_SENDER)

    @property
    def sheets_configured(self) -> bool:
        return bool(self.SPREADSHEET_ID and self.GOOGLE_SERVICE_ACCOUNT_EMAIL and self.GOOGLE_PRIVATE_KEY)

    @property
    def s3_configured(self) -> bool:
        return bool(self.MEDIA_BUCKET and self.AWS_ACCESS_KEY_ID and self.AWS_SECRET_ACCESS_KEY)

@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore
