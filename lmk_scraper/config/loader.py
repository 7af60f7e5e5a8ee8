"""
YAML settings loader with validation.

Loads run settings from YAML with:
- Environment variable substitution
- Type validation
- Default values
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import structlog
import yaml

from lmk_scraper.core.exceptions import ConfigError


LOG_LEVELS = ("DEBUG", "INFO", "WARN", "WARNING", "ERROR")
LOG_FORMATS = ("json", "console")


def substitute_env_vars(
    text: str,
    logger: Optional[structlog.typing.FilteringBoundLogger] = None,
) -> str:
    """
    Substitute environment variables in text.

    Supports formats:
    - ${VAR_NAME} - required, empty with a warning if missing
    - ${VAR_NAME:-default} - optional with default (also used when empty)

    Args:
        text: Text with env var placeholders
        logger: Logger for unset variables (module logger if not provided)

    Returns:
        Text with substituted values
    """
    logger = logger or structlog.get_logger(__name__)

    def replace(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name) or default
        else:
            value = os.getenv(var_expr)
            if value is None:
                logger.warning("env_var_not_set", var=var_expr)
                return ""
            return value

    return re.sub(r"\$\{([^}]+)\}", replace, text)


@dataclass(frozen=True)
class Settings:
    """Settings for one scraper run."""
    source_url: str
    table_selector: str = "#consumerInfoTable"
    request_timeout: float = 10.0
    sqlite_file: str = "./db.sqlite"
    table_max_width: int = 42
    table_show_details: bool = True
    log_level: str = "INFO"
    log_format: str = "json"


class ConfigLoader:
    """
    Settings loader.

    Loads YAML config files and validates against expected schema.
    """

    def __init__(
        self,
        config_dir: Optional[str] = None,
        logger: Optional[structlog.typing.FilteringBoundLogger] = None,
    ):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
                       (defaults to package config directory)
            logger: Logger for config warnings (module logger if not provided)
        """
        self.logger = (logger or structlog.get_logger(__name__)).bind(component="config")
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path(__file__).parent

    def load_file(self, filename: str) -> dict:
        """
        Load YAML config file.

        Args:
            filename: Config file name (relative to config_dir)

        Returns:
            Parsed config dict
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            raise ConfigError(f"Config file not found: {filepath}")

        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()

        # Substitute environment variables
        content = substitute_env_vars(content, self.logger)

        try:
            config = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {filepath}: {e}") from e

        if config is not None and not isinstance(config, dict):
            raise ConfigError(f"Expected a mapping in {filepath}")

        return config or {}

    def load_settings(self, filename: str = "settings.yml") -> Settings:
        """
        Load run settings from YAML.

        Args:
            filename: Settings file name

        Returns:
            Settings object
        """
        return self._parse_settings(self.load_file(filename))

    def _parse_settings(self, data: dict) -> Settings:
        """
        Parse settings dict into Settings.

        Args:
            data: Settings dict

        Returns:
            Settings object

        Raises:
            ConfigError: If required fields are missing or invalid
        """
        source = data.get("source") or {}
        storage = data.get("storage") or {}
        output = data.get("output") or {}
        logging_ = data.get("logging") or {}

        if not source.get("url"):
            raise ConfigError("Missing required field: source.url")

        log_level = str(logging_.get("level", "INFO")).upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(f"unsupported log level: {log_level}")

        log_format = str(logging_.get("format", "json")).lower()
        if log_format not in LOG_FORMATS:
            raise ConfigError(f"unsupported log format: {log_format}")

        try:
            request_timeout = float(source.get("request_timeout", 10))
            table_max_width = int(output.get("table_max_width", 42))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e

        if request_timeout <= 0:
            raise ConfigError("source.request_timeout must be positive")
        if table_max_width < 1:
            raise ConfigError("output.table_max_width must be at least 1")

        return Settings(
            source_url=source["url"],
            table_selector=source.get("table_selector", "#consumerInfoTable"),
            request_timeout=request_timeout,
            sqlite_file=str(storage.get("sqlite_file") or "./db.sqlite"),
            table_max_width=table_max_width,
            table_show_details=bool(output.get("table_show_details", True)),
            log_level=log_level,
            log_format=log_format,
        )


def load_settings(
    config_path: Optional[str] = None,
    logger: Optional[structlog.typing.FilteringBoundLogger] = None,
) -> Settings:
    """
    Convenience function to load settings.

    Args:
        config_path: Optional path to a settings YAML file
        logger: Logger for config warnings

    Returns:
        Settings object
    """
    if config_path:
        loader = ConfigLoader(str(Path(config_path).parent), logger=logger)
        return loader.load_settings(Path(config_path).name)
    else:
        loader = ConfigLoader(logger=logger)
        return loader.load_settings()
