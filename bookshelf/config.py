"""
Configuration management for Bookshelf Sync.
Values come from environment variables, optionally loaded from a .env file.
"""

import os
import secrets
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()


class AppConfig(BaseModel):
    """Configuration for the application."""

    # Catalog settings
    openlibrary_url: str = Field(
        default="https://openlibrary.org",
        description="Open Library base URL"
    )
    search_limit: int = Field(default=20, description="Maximum results per catalog search")
    request_timeout: int = Field(default=30, description="Catalog request timeout in seconds")
    catalog_max_retries: int = Field(default=0, description="Retries for failed catalog requests")

    # Storage settings
    database_url: str = Field(
        default="sqlite:///data/bookshelf.db",
        description="Database connection URL for the user data store"
    )
    blob_dir: str = Field(default="data/blobs", description="Directory for uploaded blobs")
    blob_base_url: str = Field(
        default="http://localhost:5000/media",
        description="Public URL prefix under which blobs are served"
    )

    # Application settings
    secret_key: str = Field(
        default_factory=lambda: os.getenv("SECRET_KEY", secrets.token_hex(32)),
        description="Secret key for Flask sessions"
    )
    log_level: str = Field(default="INFO", description="Logging level")
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=5000, description="Bind port")


def get_config_from_env() -> AppConfig:
    """Load configuration from environment variables."""
    return AppConfig(
        openlibrary_url=os.getenv("OPENLIBRARY_URL", "https://openlibrary.org"),
        search_limit=int(os.getenv("SEARCH_LIMIT", "20")),
        request_timeout=int(os.getenv("REQUEST_TIMEOUT", "30")),
        catalog_max_retries=int(os.getenv("CATALOG_MAX_RETRIES", "0")),
        database_url=os.getenv("DATABASE_URL", "sqlite:///data/bookshelf.db"),
        blob_dir=os.getenv("BLOB_DIR", "data/blobs"),
        blob_base_url=os.getenv("BLOB_BASE_URL", "http://localhost:5000/media"),
        secret_key=os.getenv("SECRET_KEY", secrets.token_hex(32)),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
    )
