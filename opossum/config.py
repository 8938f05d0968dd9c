"""
Configuration settings for the oPOSSUM analysis engine.

Analysis defaults (result sorting, cutoffs, KS reference distribution),
logging and batch execution options, all overridable from the environment
or a ``.env`` file.
"""

import logging
from typing import Optional, Union

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="OPOSSUM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "oPOSSUM"
    app_version: str = "3.0.0"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Result list defaults
    default_sort_by: str = "zscore"
    default_num_results: Union[int, str] = "all"
    default_zscore_cutoff: Optional[float] = None
    default_fisher_cutoff: Optional[float] = None

    # KS test reference distribution used when no background values given
    default_ks_distribution: str = "uniform"

    # Batch analyses
    batch_max_workers: int = 4

    def result_list_defaults(self) -> dict:
        """Default keyword arguments for ``CombinedResultSet.get_list``.

        The sort direction puts the most significant results first for the
        default sort field, so ``num_results`` keeps the best N.
        """
        from .core.results import SortField

        return {
            "sort_by": self.default_sort_by,
            "reverse": SortField.parse(self.default_sort_by).descending,
            "num_results": self.default_num_results,
            "zscore_cutoff": self.default_zscore_cutoff,
            "fisher_cutoff": self.default_fisher_cutoff,
        }


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging using the settings format and level."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format=settings.log_format,
    )


# Global settings instance
settings = Settings()
