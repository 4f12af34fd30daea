"""Configuration loading and validation for the ledger reconciler."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from ledger_reconciler.processing.tie_breakers import TieBreak
from ledger_reconciler.utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)

# Environment variables that override settings.yaml
ENV_TIE_BREAK = "LEDGER_RECONCILER_TIE_BREAK"
ENV_LOG_LEVEL = "LEDGER_RECONCILER_LOG_LEVEL"

# Maximum input file size to prevent memory exhaustion (50 MB)
DEFAULT_MAX_FILE_SIZE = 50 * 1024 * 1024


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


def parse_tie_break(value: object) -> TieBreak:
    """Convert a settings value into a TieBreak.

    Args:
        value: Value such as "date_proximity" or "description_similarity".

    Returns:
        Matching TieBreak member.

    Raises:
        ConfigError: If the value names no known heuristic.
    """
    if isinstance(value, TieBreak):
        return value
    try:
        return TieBreak(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(t.value for t in TieBreak)
        raise ConfigError(f"Unknown tie_break '{value}'. Expected one of: {valid}") from None


@dataclass
class MatchingConfig:
    """Configuration for the automatic matching pass.

    Attributes:
        tie_break: Heuristic used when several bookkeeping entries share
            the bank entry's amount.
    """

    tie_break: TieBreak = TieBreak.DATE_PROXIMITY

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "MatchingConfig":
        """Create from dictionary."""
        return cls(tie_break=parse_tie_break(data.get("tie_break", TieBreak.DATE_PROXIMITY.value)))


@dataclass
class ParsingConfig:
    """Configuration for reading ledger files.

    Attributes:
        max_file_size_bytes: Files larger than this are rejected.
    """

    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ParsingConfig":
        """Create from dictionary."""
        size = int(data.get("max_file_size_bytes", DEFAULT_MAX_FILE_SIZE))  # type: ignore[arg-type]
        if size <= 0:
            raise ConfigError(f"max_file_size_bytes must be positive, got {size}")
        return cls(max_file_size_bytes=size)


@dataclass
class OutputConfig:
    """Configuration for report output.

    Attributes:
        date_format: Date format for exported dates.
        currency_symbol: Currency symbol for display.
        decimal_places: Number of decimal places.
    """

    date_format: str = "%Y-%m-%d"
    currency_symbol: str = "zł"
    decimal_places: int = 2

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "OutputConfig":
        """Create from dictionary."""
        return cls(
            date_format=str(data.get("date_format", "%Y-%m-%d")),
            currency_symbol=str(data.get("currency_symbol", "zł")),
            decimal_places=int(data.get("decimal_places", 2)),  # type: ignore[arg-type]
        )


@dataclass
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Path to log file, or None for console only.
    """

    level: str = "INFO"
    file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LoggingConfig":
        """Create from dictionary."""
        log_file = data.get("file")
        return cls(
            level=str(data.get("level", "INFO")),
            file=str(log_file) if log_file else None,
        )


@dataclass
class Config:
    """Main configuration container."""

    matching: MatchingConfig = field(default_factory=MatchingConfig)
    parsing: ParsingConfig = field(default_factory=ParsingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ConfigError: If the top level is not a mapping.
        yaml.YAMLError: If file is invalid YAML.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        content = yaml.safe_load(f)

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(content).__name__}")
    return content


def _section(data: dict[str, object], name: str) -> dict[str, object]:
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(section).__name__}")
    return section


def load_settings(path: Path) -> Config:
    """Load settings from settings.yaml.

    Args:
        path: Path to settings.yaml.

    Returns:
        Config populated from the file.
    """
    data = load_yaml_file(path)

    return Config(
        matching=MatchingConfig.from_dict(_section(data, "matching")),
        parsing=ParsingConfig.from_dict(_section(data, "parsing")),
        output=OutputConfig.from_dict(_section(data, "output")),
        logging=LoggingConfig.from_dict(_section(data, "logging")),
    )


def apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to a config.

    Args:
        config: Config to update (modified in place).

    Returns:
        The same config.
    """
    tie_break = os.environ.get(ENV_TIE_BREAK)
    if tie_break:
        config.matching.tie_break = parse_tie_break(tie_break)
        logger.debug(f"Tie-break overridden from environment: {config.matching.tie_break.value}")

    log_level = os.environ.get(ENV_LOG_LEVEL)
    if log_level:
        config.logging.level = log_level.upper()

    return config


def load_config(
    settings_path: Optional[Path] = None,
    config_dir: Optional[Path] = None,
) -> Config:
    """Load the complete configuration.

    Settings come from settings.yaml when it exists, then environment
    variables (including those in a .env file) override them.

    Args:
        settings_path: Path to settings.yaml (or None to use default).
        config_dir: Base config directory (default: ./config).

    Returns:
        Complete Config object.
    """
    load_dotenv()

    if config_dir is None:
        config_dir = Path("config")
    if settings_path is None:
        settings_path = config_dir / "settings.yaml"

    if settings_path.exists():
        config = load_settings(settings_path)
        logger.info(f"Loaded settings from {settings_path}")
    else:
        config = Config()
        logger.debug(f"Settings file not found: {settings_path}, using defaults")

    return apply_env_overrides(config)


def configure_logging(config: Config, console_output: bool = True) -> logging.Logger:
    """Install log handlers as described by the logging section."""
    return setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        console_output=console_output,
    )
