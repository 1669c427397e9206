"""
Application configuration management.

This module handles configuration from environment variables using Pydantic Settings.
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application configuration from environment variables.

    All settings can be overridden via environment variables with the same name.
    """

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Image protocol
    default_cell_height: int = 18  # px per terminal row when the tty reports no pixels
    image_chunk_size: int = 4096  # base64 bytes per graphics frame

    # Remote images
    remote_image_timeout_seconds: float = 5.0
    remote_image_max_bytes: int = 10 * 1024 * 1024

    # Image protocol debug trace (any non-empty value enables it)
    debug_image_protocol: str = Field(
        default="",
        validation_alias=AliasChoices("DEBUG_IMAGE_PROTOCOL", "DEBUG_KITTY_IMAGES"),
    )
    debug_image_protocol_log: str = Field(
        default="",
        validation_alias=AliasChoices("DEBUG_IMAGE_PROTOCOL_LOG", "DEBUG_KITTY_LOG"),
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @property
    def image_trace_enabled(self) -> bool:
        return bool(self.debug_image_protocol)


# Global settings instance
settings = Settings()
