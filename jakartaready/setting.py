"""Runtime settings for jakartaready.

Values come from environment variables (optionally via a ``.env`` file).
Components receive the values they need as constructor arguments; this
module is only read by the composition root in ``core.service``.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .core import constants

load_dotenv()

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """jakartaready settings."""
    mapping_table_path: Optional[Path] = Field(
        None, description="Alternative javax -> jakarta mapping YAML (bundled table when unset)"
    )
    verify_timeout: float = Field(
        constants.DEFAULT_VERIFY_TIMEOUT, gt=0, description="Default runtime verification timeout (s)"
    )
    drain_timeout: float = Field(
        constants.DEFAULT_DRAIN_TIMEOUT, gt=0, description="Bounded wait for output drain threads (s)"
    )
    java_executable: str = Field(constants.DEFAULT_JAVA_EXECUTABLE, min_length=1)
    max_output_lines: int = Field(constants.DEFAULT_MAX_OUTPUT_LINES, gt=0)
    batch_size: int = Field(constants.DEFAULT_BATCH_SIZE, gt=0, description="Java files per refactoring phase")
    minutes_per_file: int = Field(constants.DEFAULT_MINUTES_PER_FILE, ge=0)
    log_level: str = Field("INFO", description="Root log level applied by setup_logging")

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level


_ENV_FIELDS = {
    "JAKARTAREADY_MAPPING_TABLE": "mapping_table_path",
    "JAKARTAREADY_VERIFY_TIMEOUT": "verify_timeout",
    "JAKARTAREADY_DRAIN_TIMEOUT": "drain_timeout",
    "JAKARTAREADY_JAVA": "java_executable",
    "JAKARTAREADY_MAX_OUTPUT_LINES": "max_output_lines",
    "JAKARTAREADY_BATCH_SIZE": "batch_size",
    "JAKARTAREADY_MINUTES_PER_FILE": "minutes_per_file",
    "JAKARTAREADY_LOG_LEVEL": "log_level",
}


def load_settings() -> Settings:
    """Build a Settings instance from the current environment."""
    values = {
        field: os.environ[env_name]
        for env_name, field in _ENV_FIELDS.items()
        if os.environ.get(env_name)
    }
    return Settings(**values)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return load_settings()
