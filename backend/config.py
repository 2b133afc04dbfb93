# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 10
    DATABASE_URL: str = "sqlite:///./reading_materials.db"

    FRONTEND_URL: str = "http://localhost:8081"
    LOG_LEVEL: str = "INFO"

    # Local image storage; files are served back under UPLOAD_URL_PREFIX
    UPLOAD_DIR: str = "static/uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    # Catalog paging
    CATALOG_DEFAULT_LIMIT: int = 5
    CATALOG_MAX_LIMIT: int = 100

    DEFAULT_COLLEGE: str = "College of Industrial Technology"
    AVATAR_URL_TEMPLATE: str = "https://api.dicebear.com/7.x/avataaars/svg?seed={username}"

    # Used by create_admin.py
    ADMIN_EMAIL: str = "admin@example.edu"
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "change-me-now"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
