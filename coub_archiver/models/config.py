"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, Field, field_validator


class ArchiveConfig(BaseModel):
    """A validated configuration model for the application."""

    # Concurrency
    max_workers: int = 5

    # Pacing (seconds)
    submit_interval: float = 1.0
    file_interval: float = 0.1
    image_interval: float = 1.0

    # Download behaviour
    strict_image_groups: bool = False
    max_attempts: int = 3
    retry_base_delay: float = 1.5
    connect_timeout: float = 15.0
    read_timeout: float = 90.0

    # Logging
    json_logs: bool = False

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)
    root_dir: str = Field("", repr=False)
    user: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Ensures a reasonable number of workers."""
        if v < 1 or v > 32:
            raise ValueError("Max workers must be between 1 and 32.")
        return v

    @field_validator(
        "submit_interval",
        "file_interval",
        "image_interval",
        "retry_base_delay",
    )
    @classmethod
    def validate_interval(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Intervals and delays cannot be negative.")
        return v

    @field_validator("connect_timeout", "read_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be positive.")
        return v

    @field_validator("max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("At least one download attempt is required.")
        return v

    @field_validator("user")
    @classmethod
    def validate_user(cls, v: str) -> str:
        """Rejects user names that would escape the root directory."""
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"Invalid user name: {v!r}")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path", "root_dir", "user"}
        return {key for key in cls.model_fields if key not in internal_fields}
