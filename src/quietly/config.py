"""Configuration management for quietly.

Loads configuration from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ValidationError
from .utils import get_timezone

# Load .env file if present
load_dotenv()

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Application configuration."""

    # Database
    db_path: Path

    # Identity used by the CLI when --user is not given
    user_id: Optional[str]

    # Reference timezone for streak dates and goal periods
    timezone_name: str

    # Validation limits
    max_page: int
    max_goal_target: int

    # Logging
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        db_path_str = os.environ.get(
            "QUIETLY_DB_PATH",
            str(Path.home() / ".quietly" / "quietly.db"),
        )
        db_path = Path(db_path_str).expanduser()

        return cls(
            db_path=db_path,
            user_id=os.environ.get("QUIETLY_USER_ID") or None,
            timezone_name=os.environ.get("QUIETLY_TIMEZONE", "UTC"),
            max_page=int(os.environ.get("QUIETLY_MAX_PAGE", "50000")),
            max_goal_target=int(os.environ.get("QUIETLY_MAX_GOAL_TARGET", "100000")),
            log_level=os.environ.get("QUIETLY_LOG_LEVEL", "WARNING").upper(),
        )

    @property
    def tz(self) -> tzinfo:
        """Resolved reference timezone."""
        return get_timezone(self.timezone_name)

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if not self.db_path.parent.exists():
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            except PermissionError:
                errors.append(f"Cannot create database directory: {self.db_path.parent}")

        try:
            get_timezone(self.timezone_name)
        except ValidationError as e:
            errors.append(e.message)

        if self.max_page <= 0:
            errors.append("QUIETLY_MAX_PAGE must be positive")
        if self.max_goal_target <= 0:
            errors.append("QUIETLY_MAX_GOAL_TARGET must be positive")
        if self.log_level not in LOG_LEVELS:
            errors.append(f"Invalid log level: {self.log_level}")

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
