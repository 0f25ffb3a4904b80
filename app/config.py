# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Blob-store credentials and the storage namespace are the only state shared
# between requests, and they never change after startup.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # Supabase hosts both the document metadata table and the blob buckets

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    DOCUMENTS_TABLE: str = Field(
        default="documents",
        description="Table holding document metadata records"
    )

    # -------------------------------------------------------------------------
    # Blob Storage
    # -------------------------------------------------------------------------

    STORAGE_NAMESPACE: str = Field(
        default="document-organizer",
        min_length=1,
        description="Namespace prefix prepended to every storage handle"
    )

    STORAGE_NAMESPACE_SEPARATOR: str = Field(
        default="/",
        min_length=1,
        description="Separator between the namespace and the object key"
    )

    # One bucket per resource class. Removal must target the bucket the
    # object was stored in, which is why resource_class is persisted.
    STORAGE_IMAGE_BUCKET: str = Field(default="images")
    STORAGE_VIDEO_BUCKET: str = Field(default="videos")
    STORAGE_RAW_BUCKET: str = Field(default="raw")

    # -------------------------------------------------------------------------
    # Download Settings
    # -------------------------------------------------------------------------

    DOWNLOAD_MODE: Literal["proxy", "redirect"] = Field(
        default="proxy",
        description="Stream content through the API (proxy) or redirect to the blob URL"
    )

    DOWNLOAD_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for the single upstream fetch of a download"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    SECRET_KEY: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Secret key for signing identity tokens"
    )

    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="Algorithm used to sign identity tokens"
    )

    ACCESS_TOKEN_EXPIRE_DAYS: int = Field(
        default=7,
        ge=1,
        description="Lifetime of an identity token in days"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # File Upload Settings
    # -------------------------------------------------------------------------

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Maximum file upload size in MB"
    )

    ALLOWED_EXTENSIONS: str = Field(
        default=".pdf,.jpg,.jpeg,.png,.gif,.doc,.docx,.xls,.xlsx,.txt,.zip,.rar",
        description="Allowed file extensions (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    @field_validator("STORAGE_NAMESPACE_SEPARATOR")
    @classmethod
    def _separator_not_in_key_alphabet(cls, value: str) -> str:
        # Object keys are built from digits, letters, "-", "_" and "."
        if any(char.isalnum() or char.isspace() or char in "-_." for char in value):
            raise ValueError(
                "STORAGE_NAMESPACE_SEPARATOR must not contain letters, digits, "
                "whitespace or any of - _ ."
            )
        return value

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def allowed_extensions_list(self) -> list[str]:
        """
        Parse ALLOWED_EXTENSIONS string into a list.

        Entries without a leading dot get one, so "pdf" and ".pdf" are equivalent.
        """
        extensions = []
        for ext in self.ALLOWED_EXTENSIONS.split(","):
            ext = ext.strip().lower()
            if not ext:
                continue
            extensions.append(ext if ext.startswith(".") else f".{ext}")
        return extensions

    @property
    def max_upload_size_bytes(self) -> int:
        """Convert MB to bytes for file size validation."""
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
