"""Configuration file support for genobase-importer."""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .batch import DEFAULT_BATCH_SIZE

logger = logging.getLogger(__name__)

DEFAULT_MINIMUM_FREQUENCY = 0.001  # 0.1%, or 1 in 1000.

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

CONFIG_TABLE = "genobase_importer"


@dataclass
class ImportConfig:
    """Configuration for reference data imports."""

    batch_size: int = DEFAULT_BATCH_SIZE
    minimum_frequency: float = DEFAULT_MINIMUM_FREQUENCY
    common_only: bool = True
    show_progress: bool = True
    log_level: str | None = None
    db_url: str | None = None


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


def validate_config(config_dict: dict[str, Any]) -> None:
    """Validate configuration values.

    Raises:
        ConfigValidationError: If any configuration value is invalid.
    """
    if "batch_size" in config_dict:
        batch_size = config_dict["batch_size"]
        if isinstance(batch_size, bool) or not isinstance(batch_size, int):
            raise ConfigValidationError(
                f"batch_size must be an integer, got {type(batch_size).__name__}"
            )
        if batch_size <= 0:
            raise ConfigValidationError(f"batch_size must be positive, got {batch_size}")

    if "minimum_frequency" in config_dict:
        minimum_frequency = config_dict["minimum_frequency"]
        if isinstance(minimum_frequency, bool) or not isinstance(minimum_frequency, (int, float)):
            raise ConfigValidationError(
                f"minimum_frequency must be a number, got {type(minimum_frequency).__name__}"
            )
        if not 0.0 <= minimum_frequency <= 1.0:
            raise ConfigValidationError(
                f"minimum_frequency must be between 0 and 1, got {minimum_frequency}"
            )

    for flag in ("common_only", "show_progress"):
        if flag in config_dict and not isinstance(config_dict[flag], bool):
            raise ConfigValidationError(
                f"{flag} must be a boolean, got {type(config_dict[flag]).__name__}"
            )

    if "log_level" in config_dict:
        log_level = config_dict["log_level"]
        if not isinstance(log_level, str):
            raise ConfigValidationError(
                f"log_level must be a string, got {type(log_level).__name__}"
            )
        if log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigValidationError(
                f"log_level must be one of {VALID_LOG_LEVELS}, got '{log_level}'"
            )


def load_config(config_path: Path, overrides: dict[str, Any] | None = None) -> ImportConfig:
    """Load configuration from a TOML file.

    Settings are read from the ``[genobase_importer]`` table; unknown keys
    are ignored.

    Args:
        config_path: Path to the TOML configuration file.
        overrides: Optional dict of values to override loaded config.

    Returns:
        ImportConfig instance with loaded values.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ConfigValidationError: If any configuration value is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "rb") as f:
        toml_data = tomllib.load(f)

    config_dict = toml_data.get(CONFIG_TABLE, {})

    if overrides:
        config_dict.update(overrides)

    validate_config(config_dict)

    valid_fields = {
        "batch_size",
        "minimum_frequency",
        "common_only",
        "show_progress",
        "log_level",
        "db_url",
    }

    ignored = set(config_dict) - valid_fields
    if ignored:
        logger.debug("Ignoring unknown configuration keys: %s", ", ".join(sorted(ignored)))

    filtered_config = {k: v for k, v in config_dict.items() if k in valid_fields}
    if "log_level" in filtered_config:
        filtered_config["log_level"] = filtered_config["log_level"].upper()

    return ImportConfig(**filtered_config)


def resolve_database_url(db_url: str | None = None) -> str | None:
    """Resolve the PostgreSQL URL to import into.

    Priority (highest to lowest):
        1. Explicit URL (``--db`` or config file)
        2. POSTGRES_URL environment variable
        3. PG* environment variables (PGHOST, PGPORT, PGUSER, PGDATABASE)

    The password is never embedded here; asyncpg reads PGPASSWORD itself.
    """
    if db_url:
        return db_url

    if url := os.environ.get("POSTGRES_URL"):
        return url

    host = os.environ.get("PGHOST")
    if not host:
        return None

    port = os.environ.get("PGPORT", "5432")
    user = os.environ.get("PGUSER", "postgres")
    database = os.environ.get("PGDATABASE", "genobase")
    return f"postgresql://{user}@{host}:{port}/{database}"
