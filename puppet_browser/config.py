"""Configuration management for puppet-browser."""

import itertools
import logging
import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Per-process counter for default session file names
_session_counter = itertools.count(1)


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PUPPET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage paths
    data_dir: Path = Field(
        default=Path.home() / ".puppet-browser",
        description="Base directory for all data storage",
    )
    profile: str = Field(
        default="puppet",
        description="Profile name used to derive default session file names",
    )
    session_file: Path | None = Field(
        default=None,
        description="Explicit session file (overrides the derived default)",
    )

    # Browser settings
    url: str = Field(
        default="https://wx.qq.com",
        description="Default URL for open()",
    )
    browser_type: Literal["chrome", "edge", "chromium", "firefox", "webkit"] = Field(
        default="chromium",
        description="Browser to drive",
    )
    headless: bool = Field(
        default=True,
        description="Run browser in headless mode",
    )
    proxy_url: str | None = Field(
        default=None,
        description="HTTP proxy URL (e.g., http://127.0.0.1:7890)",
    )

    # Timeouts
    navigation_timeout: int = Field(
        default=60000,
        description="Navigation timeout in milliseconds",
    )
    live_timeout: float = Field(
        default=5.0,
        description="Upper bound in seconds for the ready_live() probe",
    )

    log_level: str = Field(default="INFO")

    @property
    def session_dir(self) -> Path:
        """Directory for derived session files."""
        return self.data_dir / "sessions"

    def ensure_dirs(self) -> None:
        """Create all necessary directories."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.session_dir.mkdir(parents=True, exist_ok=True)

    def default_session_file(self) -> Path:
        """Session file for a browser built without an explicit one.

        Combines profile, pid and a per-process counter so concurrent
        runs never share a file.
        """
        if self.session_file is not None:
            return self.session_file
        name = f"{self.profile}-{os.getpid()}-{next(_session_counter)}.json"
        return self.session_dir / name


def configure_logging(level: str | None = None) -> None:
    """Apply a basic logging setup for applications using the library."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Global settings instance
settings = Settings()
