"""
FsMatcher Configuration - pydantic-settings based.

Runtime knobs (logging, hashing) are read from environment variables or a
.env file. Rule sets and format maps are NOT settings: they are pushed in
as JSON documents through init_matcher().
"""

import os
import sys
import tempfile

from pydantic import Field
from pydantic_settings import BaseSettings


def default_log_dir() -> str:
    """Platform-specific default log directory."""
    if sys.platform.startswith("win"):
        return os.path.join(tempfile.gettempdir(), "FsMatcher", "Logs")
    if sys.platform == "darwin":
        return "/opt/.fsmatcher/logs"
    return "/var/log/fsmatcher"


class Settings(BaseSettings):
    """Library-wide settings sourced from environment variables."""

    # ── Logging ──
    log_dir: str | None = Field(
        default=None,
        description="Directory for the rotating log file. None = platform default",
    )
    log_file_name: str = Field(default="fs_matcher.log", description="Log file name")
    log_max_bytes: int = Field(
        default=5 * 1024 * 1024, description="Rotate the log file past this size"
    )
    log_backup_count: int = Field(default=2, description="Rotated log files kept")
    log_level: str = Field(default="INFO", description="Minimum level written to file")

    # ── Hashing ──
    hash_chunk_size: int = Field(
        default=64 * 1024, description="Block size used when streaming file digests"
    )

    # ── HTTP host ──
    rule_config_path: str | None = Field(
        default=None, description="Rule set JSON loaded at HTTP startup"
    )
    format_config_path: str | None = Field(
        default=None, description="Format map JSON loaded at HTTP startup"
    )

    model_config = {
        "env_prefix": "FSMATCHER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def resolved_log_dir(self) -> str:
        return self.log_dir or default_log_dir()


# Singleton instance - imported by other modules
settings = Settings()
