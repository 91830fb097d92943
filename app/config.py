from typing import List, Literal

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # "memory" keeps everything in process; "database" uses DATABASE_URL
    STORAGE_BACKEND: Literal["memory", "database"] = "memory"
    DATABASE_URL: str = "postgresql+asyncpg://user:password@db:5432/marketplace_db"
    DATABASE_AUTO_CREATE: bool = True
    DATABASE_ECHO: bool = False
    REDIS_URL: str = "redis://localhost:6379/0"
    RATE_LIMIT_ENABLED: bool = True
    # Uploaded listing photos
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_FILES: int = 10
    MAX_UPLOAD_SIZE_BYTES: int = 10 * 1024 * 1024
    SEED_DEMO_DATA: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["https://*.onrender.com", "https://*.vercel.app"]
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
