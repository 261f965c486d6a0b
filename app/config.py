import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


class CustomSettings(BaseSettings):
    """Application settings loaded from environment variables.

    Validates configuration at startup to catch misconfiguration early.
    """

    log_level: str = "INFO"
    max_upload_size_bytes: int = 50 * 1024 * 1024  # 50 MiB
    decode_timeout_sec: int = 60  # XML decoding timeout, 0 disables timeout
    decode_chunk_size: int = 64 * 1024

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate log level name."""
        normalized = value.upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @field_validator("max_upload_size_bytes", "decode_chunk_size")
    @classmethod
    def validate_positive_ints(cls, value: int, info) -> int:
        """Ensure size settings are positive integers."""
        if value <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return value

    @field_validator("decode_timeout_sec")
    @classmethod
    def validate_decode_timeout(cls, value: int) -> int:
        """Validate XML decoding timeout (seconds)."""
        if value < 0:
            raise ValueError("decode_timeout_sec must be >= 0")
        return value

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.info("Configuration loaded:")
        logger.info("  Log Level: %s", self.log_level)
        logger.info("  Max Upload Size: %s bytes", self.max_upload_size_bytes)
        logger.info(
            "  Decode Timeout: %s seconds",
            self.decode_timeout_sec or "disabled",
        )
        logger.info("  Decode Chunk Size: %s bytes", self.decode_chunk_size)


settings = CustomSettings()


def setup_logging() -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
