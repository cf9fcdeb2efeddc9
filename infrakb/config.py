"""Centralized settings for InfraKB via Pydantic BaseSettings.

All configuration is read from environment variables with the INFRAKB_ prefix,
falling back to the defaults defined here. Set values in a .env file or export
them in the shell before importing the library or running the CLI.

The trust scorer functions never read these settings themselves. Callers that
want configured thresholds (the contribution store, the search engine, the CLI)
read them here and pass them in explicitly.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Environment variable names are formed by uppercasing the field name and
    prepending the INFRAKB_ prefix.  Example: INFRAKB_DEFAULT_SEARCH_LIMIT
    overrides default_search_limit.
    """

    # Community review
    rereview_downvote_threshold: int = 3  # downvotes that send an approved contribution back to review

    # Auto-approval reputation bands (lower edge of each band, inclusive)
    auto_approve_tip_reputation: int = 21
    auto_approve_standard_reputation: int = 51
    auto_approve_trusted_reputation: int = 81

    # Search
    default_search_limit: int = 10
    max_search_limit: int = 50
    default_min_score: float = 0.1

    # Context enrichment
    enrich_min_confidence: float = 0.5

    # Source auditing
    stale_source_days: int = 365

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="INFRAKB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Module-level singleton, imported throughout the codebase
settings = Settings()
