"""
Configuration handling for the Lightroom plugin toolkit.
"""

import json
import os
import re
from dataclasses import dataclass, fields, asdict
from typing import Optional, Dict, Any

from .logging_setup import get_logger
from .retry import RetryPolicy

logger = get_logger(__name__)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class AppConfig:
    """Main application configuration."""
    server_url: str = ""
    api_key: str = ""
    enable_selection_filter: bool = True
    enable_fuzzy_matching: bool = False
    selection_filter: str = ""
    similarity_threshold: float = 0.8  # Minimum score for fuzzy collection matches
    numeric_setting: float = 1.0  # Free setting, 0.0-10.0
    max_retries: int = 2  # Retries beyond the first attempt
    retry_delay: float = 1.0
    request_timeout: int = 30
    db_busy_timeout: int = 5000  # SQLite busy timeout for catalog reads, in milliseconds
    log_level: str = "INFO"
    log_file: Optional[str] = None
    debug_mode: bool = False

    def retry_policy(self, label: str = "API call") -> RetryPolicy:
        """
        Build the retry policy used for external API calls.

        Args:
            label: Human-readable name of the call for log messages

        Returns:
            RetryPolicy object
        """
        return RetryPolicy(max_retries=self.max_retries, retry_delay=self.retry_delay, label=label)


def validate_config(config: AppConfig) -> AppConfig:
    """
    Validate configuration values.

    Args:
        config: AppConfig object

    Returns:
        The same config, for chaining

    Raises:
        ValueError: If a value is out of range
    """
    if not 0.0 <= float(config.numeric_setting) <= 10.0:
        raise ValueError("Please enter a number between 0.0 and 10.0 for numeric_setting")
    if not 0.0 <= float(config.similarity_threshold) <= 1.0:
        raise ValueError("similarity_threshold must be between 0.0 and 1.0")
    if config.max_retries < 0:
        raise ValueError("max_retries must be zero or greater")
    if config.retry_delay < 0:
        raise ValueError("retry_delay must be zero or greater")
    if config.request_timeout <= 0:
        raise ValueError("request_timeout must be greater than zero")
    if config.db_busy_timeout <= 0:
        raise ValueError("db_busy_timeout must be greater than zero")
    if str(config.log_level).upper() not in VALID_LOG_LEVELS:
        raise ValueError(f"Unsupported log level: {config.log_level}")
    return config


def _substitute_env_vars(value: Any) -> Any:
    """
    Substitute ${ENV_VAR} references in string values.

    Args:
        value: Value to process for environment variables

    Returns:
        Value with environment variables substituted
    """
    if not isinstance(value, str):
        return value

    def replace_env_var(match):
        env_var = match.group(1)
        env_value = os.environ.get(env_var)
        if env_value is None:
            logger.warning(f"Environment variable {env_var} not found")
            return ""
        return env_value

    return re.sub(r'\${([^}]+)}', replace_env_var, value)


def config_from_dict(config_dict: Dict[str, Any]) -> AppConfig:
    """
    Build a validated AppConfig from a plain dictionary.

    Unknown keys are logged and ignored.
    """
    known = {f.name for f in fields(AppConfig)}
    values = {}
    for key, value in config_dict.items():
        if key not in known:
            logger.warning(f"Ignoring unknown configuration field: {key}")
            continue
        values[key] = _substitute_env_vars(value)
    return validate_config(AppConfig(**values))


def load_config(config_path: str) -> AppConfig:
    """
    Load and validate configuration from JSON file.

    A missing file yields the default configuration.

    Args:
        config_path: Path to the configuration JSON file

    Returns:
        AppConfig object

    Raises:
        ValueError: If the configuration is invalid
        RuntimeError: If the configuration file cannot be loaded
    """
    config_path = os.path.abspath(os.path.expanduser(config_path))

    if not os.path.exists(config_path):
        logger.debug(f"No configuration at {config_path}, using defaults")
        return AppConfig()

    try:
        with open(config_path, 'r') as cfg:
            config_dict = json.load(cfg)
    except (json.JSONDecodeError, IOError) as e:
        raise RuntimeError(f"Failed to load configuration from {config_path}: {str(e)}")

    if not isinstance(config_dict, dict):
        raise RuntimeError(f"Failed to load configuration from {config_path}: expected a JSON object")

    return config_from_dict(config_dict)


def save_config(config: AppConfig, config_path: str) -> None:
    """
    Save configuration to JSON file.

    Args:
        config: AppConfig object
        config_path: Path to save the configuration

    Raises:
        RuntimeError: If the configuration cannot be saved
    """
    try:
        with open(config_path, 'w') as f:
            json.dump(asdict(config), f, indent=2)
    except (IOError, TypeError) as e:
        raise RuntimeError(f"Failed to save configuration: {str(e)}")


class PreferenceStore:
    """Named preference values persisted to a JSON file, defaulting on first access."""

    def __init__(self, config_path: str):
        self.config_path = config_path
        self._config = load_config(config_path)
        self._field_types = {f.name: f.type for f in fields(AppConfig)}

    def get(self, name: str) -> Any:
        """
        Get a preference value.

        Raises:
            KeyError: If the preference name is unknown
        """
        self._check_name(name)
        return getattr(self._config, name)

    def set(self, name: str, value: Any) -> None:
        """
        Set, validate and persist a preference value.

        String values are coerced to the field's type, so values typed on the
        command line can be passed straight through.

        Raises:
            KeyError: If the preference name is unknown
            ValueError: If the value is invalid
        """
        self._check_name(name)
        coerced = _coerce(value, getattr(AppConfig(), name), self._field_types[name])
        previous = getattr(self._config, name)
        setattr(self._config, name, coerced)
        try:
            validate_config(self._config)
        except ValueError:
            setattr(self._config, name, previous)
            raise
        save_config(self._config, self.config_path)
        logger.info(f"Preference {name} updated")

    def as_config(self) -> AppConfig:
        """Return the current preferences as an AppConfig."""
        return self._config

    def items(self):
        return asdict(self._config).items()

    def _check_name(self, name: str) -> None:
        if name not in self._field_types:
            raise KeyError(f"Unknown preference: {name}")


def _coerce(value: Any, default: Any, annotation: Any) -> Any:
    """Coerce a raw (usually string) value to the type of a config field."""
    if not isinstance(value, str):
        return value
    if isinstance(default, bool):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
        raise ValueError(f"Expected a boolean value, got {value!r}")
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    if default is None and annotation == Optional[str] and value == "":
        return None
    return value
