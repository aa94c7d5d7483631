"""Configuration management for AI Photo Studio.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the PHOTOSTUDIO_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (PHOTOSTUDIO_* prefix)
2. .env file in the project root
3. Default values defined in PhotoStudioConfig

Example .env file:
    PHOTOSTUDIO_GEMINI_API_KEY=your-key
    PHOTOSTUDIO_DATA_DIR=data
    PHOTOSTUDIO_SERVER_PORT=7860

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time and
is the single source of truth for configuration values across the application.

Usage Example
-------------
    from photostudio.core.config import config

    print(config.image_model_id)
    print(config.data_dir)

Storage
-------
The image library is persisted by :class:`~photostudio.core.storage.FileStorage`
under ``data_dir``, one JSON file per storage key.  ``storage_quota_bytes``
optionally caps the size of a single stored value the way browser local
storage does; leave it unset for no cap.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Templates ship inside the package so an installed wheel can serve the page.
PACKAGE_DIR = Path(__file__).resolve().parent.parent


class PhotoStudioConfig(BaseSettings):
    """Main configuration for AI Photo Studio.

    Attributes
    ----------
    Remote Model Settings:
        gemini_api_key : str | None
            API key for the Google generative AI service
        text_model_id : str
            Imagen model used for text-only generation
        image_model_id : str
            Gemini model used when one or two reference images are supplied

    Library Settings:
        data_dir : Path
            Directory holding the persisted library
        library_key : str
            Storage key the library is saved under
        storage_quota_bytes : int | None
            Optional cap on the size of one stored value

    UI Settings:
        default_language : Literal["en", "vi"]
            Language used for messages when a request does not name one
        templates_dir : Path
            Directory containing ``index.html``
        server_host : str
            Server bind address
        server_port : int
            Server port (1024-65535)
        log_level : str
            Root logging level applied by the console entry point

    Notes
    -----
    - ``data_dir`` is created automatically if it doesn't exist
    - To modify config, set environment variables and restart the application
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PHOTOSTUDIO_",
        case_sensitive=False,
    )

    # Remote model settings
    gemini_api_key: str | None = Field(
        default=None,
        description="API key for the Google generative AI service",
    )
    text_model_id: str = Field(
        default="imagen-4.0-generate-001",
        description="Model used for text-to-photo generation",
    )
    image_model_id: str = Field(
        default="gemini-2.5-flash-image",
        description="Model used for generation from one or two reference images",
    )

    # Library settings
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the persisted image library",
    )
    library_key: str = Field(
        default="ai-photo-studio-library",
        description="Storage key the library is saved under",
    )
    storage_quota_bytes: int | None = Field(
        default=None,
        description="Optional maximum size of one stored value in bytes",
        ge=1,
    )

    # UI settings
    default_language: Literal["en", "vi"] = Field(
        default="en",
        description="Fallback language for user-visible messages",
    )
    templates_dir: Path = Field(
        default=PACKAGE_DIR / "templates",
        description="Directory containing index.html",
    )
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the data directory.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)


# Global configuration instance
config = PhotoStudioConfig()
