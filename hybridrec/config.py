"""Runtime configuration for HybridRec.

Settings are read from environment variables prefixed with ``HYBRIDREC_``
(or a local ``.env`` file). The cardinality knobs bound how much data each
recommendation strategy reads per request.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RecommenderSettings(BaseSettings):
    """Service and algorithm settings."""

    model_config = SettingsConfigDict(
        env_prefix="HYBRIDREC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_dir: str = "data"
    log_level: str = "INFO"

    default_limit: int = Field(default=10, gt=0)
    max_user_interactions: int = Field(default=100, gt=0)
    candidate_user_limit: int = Field(default=100, gt=0)
    similar_user_limit: int = Field(default=10, gt=0)
    similarity_threshold: float = Field(default=0.1, ge=0.0, le=1.0)
    similar_user_interaction_limit: int = Field(default=50, gt=0)
    content_candidate_limit: int = Field(default=500, gt=0)
    popularity_window_days: int = Field(default=30, gt=0)

    # Deadline for each concurrent strategy; a late branch counts as empty
    branch_timeout_seconds: float = Field(default=5.0, gt=0)


@lru_cache(maxsize=1)
def get_settings() -> RecommenderSettings:
    """Return the process-wide settings instance."""
    return RecommenderSettings()
