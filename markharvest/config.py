"""Configuration management for markharvest using Pydantic Settings."""

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from markharvest.core.harvesting.retrieval_policy import RetrievalPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Retrieval settings
    request_timeout_ms: int | None = Field(
        default=30000,
        description="Per-request timeout in milliseconds (unset uses the httpx default)",
    )
    max_redirects: int = Field(
        default=3,
        description="Maximum number of redirects followed per request",
    )
    persist_cookies: bool = Field(
        default=True,
        description="Keep cookies between requests of the same harvest",
    )

    # Segmentation settings
    chunk_size: int = Field(
        default=1000,
        description="Target segment size in characters",
    )
    chunk_overlap: int | None = Field(
        default=100,
        description="Characters repeated between adjacent segments",
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    environment: str = Field(
        default="development",
        description="Environment (development or production)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard logging level."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed_levels:
            raise ValueError(
                f"Invalid log_level: {v}. Allowed values: {', '.join(sorted(allowed_levels))}"
            )
        return v.upper()

    @field_validator("request_timeout_ms")
    @classmethod
    def validate_timeout(cls, v: int | None) -> int | None:
        """Validate timeout is positive when set."""
        if v is not None and v <= 0:
            raise ValueError(f"request_timeout_ms must be positive, got {v}")
        return v

    @field_validator("max_redirects")
    @classmethod
    def validate_max_redirects(cls, v: int) -> int:
        """Validate redirect limit is not negative."""
        if v < 0:
            raise ValueError(f"max_redirects must not be negative, got {v}")
        return v

    @model_validator(mode="after")
    def validate_chunk_overlap(self) -> "Settings":
        """Validate overlap is smaller than the segment size."""
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.chunk_overlap is not None and not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be between 0 and "
                f"chunk_size ({self.chunk_size})"
            )
        return self

    def retrieval_policy(self) -> RetrievalPolicy:
        """Build the retrieval policy described by these settings."""
        builder = (
            RetrievalPolicy.builder()
            .max_redirects(self.max_redirects)
            .persist_cookies(self.persist_cookies)
        )
        if self.request_timeout_ms is not None:
            builder = builder.timeout(self.request_timeout_ms)
        return builder.build()


# Global settings instance
settings = Settings()
