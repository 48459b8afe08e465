"""

app/core/config.py

"""


from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # App
    APP_NAME: str = "LyricsAdmin"
    DEBUG: bool = True
    SECRET_KEY: str

    # Database
    MONGODB_URL: str
    DATABASE_NAME: str

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Auth
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    ALGORITHM: str = "HS256"

    # File Upload
    MAX_UPLOAD_SIZE: int = 10485760  # 10MB

    # Bulk import
    IMPORT_CSV_DEFAULT_LANGUAGE: str = "English"
    IMPORT_ERROR_PREVIEW: int = 3

    # Email settings
    SENDGRID_API_KEY: str = ""
    SENDGRID_FROM_EMAIL: str = "no-reply@example.com"
    FRONTEND_URL: str = "http://localhost:3000"  # For invite links
    INVITE_TOKEN_EXPIRE_HOURS: int = 72

    # DigitalOcean Spaces (song covers)
    DO_SPACES_ACCESS_KEY_ID: str = ""
    DO_SPACES_BUCKET_NAME: str = ""
    DO_SPACES_ENDPOINT: str = ""
    DO_SPACES_SECRET_KEY: str = ""
    DO_SPACES_CDN_URL: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
