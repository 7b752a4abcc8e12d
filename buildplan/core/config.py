from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide defaults loaded from environment variables.

    Every field can be overridden with a ``BUILDPLAN_`` prefixed variable,
    e.g. ``BUILDPLAN_CONFIDENCE_FLOOR=0.7``. Per-call configuration
    (detection flags, orchestration policy, build mode) lives in the
    dedicated config objects and takes precedence over these defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="BUILDPLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Library classifier
    confidence_floor: float = 0.6
    mixed_score_threshold: float = 0.3

    # Per-file classifier
    mixed_min_file_confidence: float = 0.5
    default_framework: str = "react"
    max_scan_file_size: int = 256 * 1024
    syntax_scan_timeout_seconds: float = 2.0

    # Logging
    debug: bool = False
    json_logs: bool = False

    @field_validator(
        "confidence_floor",
        "mixed_score_threshold",
        "mixed_min_file_confidence",
    )
    @classmethod
    def _unit_interval(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("must be within [0, 1]")
        return v

    @field_validator("syntax_scan_timeout_seconds")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v


def get_settings() -> Settings:
    return Settings()
