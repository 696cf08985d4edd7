"""Settings for the OpenProject adapter.

Values are resolved once at startup, highest priority first:
- command line flags (--api-url, --api-key, --scratch-dir, --log-level)
- environment variables (OPENPROJECT_API_URL, OPENPROJECT_API_KEY, ...)
- a .env file in the working directory
"""
import argparse
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Sequence

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger("openproject-core.config")

DEFAULT_TIMEOUT = 30.0


class ConfigurationError(Exception):
    """Raised when required settings are missing or invalid."""


class Settings(BaseModel):
    """Immutable configuration shared by every tool invocation."""

    model_config = ConfigDict(frozen=True)

    api_url: str = Field(..., min_length=1)
    api_key: str = Field(..., min_length=1, repr=False)
    scratch_root: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
    timeout: float = Field(DEFAULT_TIMEOUT, gt=0)
    log_level: str = "INFO"

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openproject-mcp",
        description="OpenProject MCP Server",
    )
    parser.add_argument("--api-url", help="OpenProject base URL (default: OPENPROJECT_API_URL)")
    parser.add_argument("--api-key", help="OpenProject API key (default: OPENPROJECT_API_KEY)")
    parser.add_argument(
        "--scratch-dir",
        help="Directory for downloaded attachments (default: OPENPROJECT_SCRATCH_DIR or the system temp dir)",
    )
    parser.add_argument("--log-level", help="Logging level (default: LOG_LEVEL or INFO)")
    return parser


def load_settings(argv: Optional[Sequence[str]] = None, env_file: Optional[str] = None) -> Settings:
    """Resolve settings from CLI arguments, environment and .env file.

    Raises:
        ConfigurationError: if the API URL or API key is absent, or a value is invalid.
    """
    args = build_arg_parser().parse_args(argv)
    # Existing environment variables win over .env entries
    load_dotenv(env_file or find_dotenv(usecwd=True))

    api_url = args.api_url or os.getenv("OPENPROJECT_API_URL")
    api_key = args.api_key or os.getenv("OPENPROJECT_API_KEY")

    if not api_url:
        raise ConfigurationError(
            "API URL is required. Provide it via --api-url argument or OPENPROJECT_API_URL environment variable."
        )
    if not api_key:
        raise ConfigurationError(
            "API key is required. Provide it via --api-key argument or OPENPROJECT_API_KEY environment variable."
        )

    values = {"api_url": api_url, "api_key": api_key}
    scratch_dir = args.scratch_dir or os.getenv("OPENPROJECT_SCRATCH_DIR")
    if scratch_dir:
        values["scratch_root"] = Path(scratch_dir).expanduser()
    timeout = os.getenv("OPENPROJECT_TIMEOUT")
    if timeout:
        values["timeout"] = timeout
    log_level = args.log_level or os.getenv("LOG_LEVEL")
    if log_level:
        values["log_level"] = log_level

    try:
        settings = Settings(**values)
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    logger.debug(f"Loaded settings for {settings.api_url} (scratch root: {settings.scratch_root})")
    return settings
