"""
Configuration management for twig.

This module provides centralized configuration for all components:
- Repository layout and naming conventions
- Logging settings
"""

import os
from pathlib import Path
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()


class RepositoryConfig(BaseModel):
    """Configuration for repository layout and defaults."""

    repo_dir_name: str = Field(
        default=".twig", description="Name of the repository marker directory"
    )
    default_branch: str = Field(
        default="master", description="Branch created by init and named by HEAD"
    )
    initial_commit_message: str = Field(
        default="initial commit", description="Message of the root commit"
    )
    abbrev_length: int = Field(
        default=7,
        ge=4,
        le=40,
        description="Length of abbreviated commit ids in merge log entries",
    )


class LogConfig(BaseModel):
    """Configuration for logging system."""

    level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Logging level"
    )
    format: str = Field(
        default="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{extra[component]}</cyan> | "
        "<level>{message}</level>",
        description="Log message format",
    )
    rotation: str = Field(default="10 MB", description="Log file rotation size")
    retention: str = Field(default="1 month", description="Log file retention period")
    log_dir: str = Field(default="logs", description="Directory for log files")
    enable_file_logging: bool = Field(
        default=False, description="Whether to enable file logging"
    )
    enable_console_logging: bool = Field(
        default=True, description="Whether to enable console logging"
    )

    @property
    def log_path(self) -> Path:
        """Get absolute path to the log directory."""
        return Path(self.log_dir).resolve()


class Config(BaseModel):
    """Main configuration object for twig."""

    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    logging: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        return cls(
            repository=RepositoryConfig(
                repo_dir_name=os.getenv("TWIG_REPO_DIR", ".twig"),
                default_branch=os.getenv("TWIG_DEFAULT_BRANCH", "master"),
            ),
            logging=LogConfig(
                level=cast(
                    Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                    os.getenv("TWIG_LOG_LEVEL", "WARNING"),
                ),
                log_dir=os.getenv("TWIG_LOG_DIR", "logs"),
                enable_file_logging=os.getenv("TWIG_LOG_TO_FILE", "false").lower()
                in ("1", "true", "yes"),
            ),
        )


# Global configuration instance
config = Config.from_env()
