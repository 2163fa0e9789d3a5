from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Realty Sales API"
    ENV: str = "development"

    # -------------------------------------------------
    # Frontend Domains
    # -------------------------------------------------
    FRONTEND_ORIGINS: List[str] = [
        "http://localhost:3000",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    PROJECTS_TABLE: str = "projects"
    COUNTIES_TABLE: str = "counties"

    # -------------------------------------------------
    # Spreadsheet import
    # -------------------------------------------------
    IMPORT_MAX_UPLOAD_BYTES: int = Field(
        10 * 1024 * 1024,
        description="Largest spreadsheet accepted by the import endpoints (default: 10 MB)",
    )
    IMPORT_DATE_TOLERANCE_SECONDS: int = Field(
        60,
        description="Two dates closer than this are treated as the same value when diffing",
    )
    IMPORT_PREVIEW_ROWS: int = 3

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    # Real environment variables only, no .env file
    model_config = SettingsConfigDict(case_sensitive=True)


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
settings.BACKEND_CORS_ORIGINS = sorted(
    {origin.rstrip("/") for origin in settings.FRONTEND_ORIGINS if origin}
)
