"""Configuration management for bookshelf.

Loads configuration from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .api.goodreads import DEFAULT_USER_AGENT

# Load .env file if present
load_dotenv()


@dataclass
class Config:
    """Application configuration."""

    # Sources
    feed_url: Optional[str]
    csv_path: Path

    # Output
    output_path: Path

    # HTTP
    http_timeout: float  # seconds
    cover_delay: float  # seconds between book page requests
    user_agent: str

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            feed_url=os.environ.get("BOOKSHELF_FEED_URL") or None,
            csv_path=Path(
                os.environ.get("BOOKSHELF_CSV_PATH", "data/goodreads_library.csv")
            ).expanduser(),
            output_path=Path(
                os.environ.get("BOOKSHELF_OUTPUT_PATH", "data/books.json")
            ).expanduser(),
            http_timeout=float(os.environ.get("BOOKSHELF_HTTP_TIMEOUT", "30")),
            cover_delay=float(os.environ.get("BOOKSHELF_COVER_DELAY", "1.0")),
            user_agent=os.environ.get("BOOKSHELF_USER_AGENT", DEFAULT_USER_AGENT),
        )

    def validate(self, require_feed: bool = True) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if require_feed and not self.feed_url:
            errors.append("BOOKSHELF_FEED_URL is not set")

        if self.output_path.is_dir():
            errors.append(f"Output path is a directory: {self.output_path}")
        elif self.output_path.parent.exists() and not self.output_path.parent.is_dir():
            errors.append(f"Output directory is not a directory: {self.output_path.parent}")

        if self.http_timeout <= 0:
            errors.append("BOOKSHELF_HTTP_TIMEOUT must be positive")
        if self.cover_delay < 0:
            errors.append("BOOKSHELF_COVER_DELAY must not be negative")

        return errors


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
