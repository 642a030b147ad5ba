import logging

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


class RankingConfig(BaseModel):
    max_elements: int = 15  # Largest order that may be fully enumerated
    max_steps: int | None = None
    time_limit_seconds: float | None = None
    check_transitivity: bool = True
    count_max_steps: int = 100_000  # Count budget for orders beyond max_elements

    @field_validator("max_elements")
    @classmethod
    def validate_max_elements(cls, v) -> int:
        """Validate max_elements is positive."""
        if v <= 0:
            raise ValueError("max_elements must be greater than 0")
        return v

    @field_validator("count_max_steps")
    @classmethod
    def validate_count_max_steps(cls, v) -> int:
        """Validate count_max_steps is positive."""
        if v <= 0:
            raise ValueError("count_max_steps must be greater than 0")
        return v

    @field_validator("max_steps")
    @classmethod
    def validate_max_steps(cls, v) -> int | None:
        """Validate max_steps is positive when set."""
        if v is not None and v <= 0:
            raise ValueError("max_steps must be greater than 0")
        return v

    @field_validator("time_limit_seconds")
    @classmethod
    def validate_time_limit_seconds(cls, v) -> float | None:
        """Validate time_limit_seconds is positive when set."""
        if v is not None and v <= 0:
            raise ValueError("time_limit_seconds must be greater than 0")
        return v


class SamplingConfig(BaseModel):
    n_samples: int = 10000
    burn_in: int | None = None  # Defaults to n**3 transitions
    thinning: int | None = None  # Defaults to n transitions between samples
    seed: int | None = None

    @field_validator("n_samples")
    @classmethod
    def validate_n_samples(cls, v) -> int:
        """Validate n_samples allows a spread estimate."""
        if v < 2:
            raise ValueError("n_samples must be at least 2")
        return v

    @field_validator("burn_in")
    @classmethod
    def validate_burn_in(cls, v) -> int | None:
        """Validate burn_in is non-negative when set."""
        if v is not None and v < 0:
            raise ValueError("burn_in must not be negative")
        return v

    @field_validator("thinning")
    @classmethod
    def validate_thinning(cls, v) -> int | None:
        """Validate thinning is positive when set."""
        if v is not None and v <= 0:
            raise ValueError("thinning must be greater than 0")
        return v


class Settings(BaseSettings):
    log_path: str = "data/logs/posetrank.jsonl"
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POSETRANK_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @field_validator("log_path", mode="before")
    @classmethod
    def validate_log_path(cls, v) -> str:
        """Fall back to the default log path when an empty value is supplied."""
        default_path = "data/logs/posetrank.jsonl"
        if v is None or not str(v).strip():
            logger.warning(f"Invalid log_path value: {v!r}. Using default: {default_path}")
            return default_path
        return str(v)
