'''
Configuration management system for hacreg.

Settings are layered, later layers overriding earlier ones:
1. Default configurations built into the package
2. An optional user-specific JSON configuration file
3. Environment variables (``HACREG_<SECTION>_<OPTION>``)
4. Runtime modifications through ``set_config``

The user configuration file is only read when it already exists; nothing is
written to disk unless ``save_config`` is called explicitly.
'''

import os
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import ConfigurationError
from .types import LogLevel

# Set up module-level logger
logger = logging.getLogger("hacreg.core.config")

# Constants for configuration paths and environment variables
CONFIG_ENV_PREFIX = "HACREG_"
DEFAULT_CONFIG_FILENAME = "hacreg_config.json"
USER_CONFIG_DIR_ENV = "HACREG_CONFIG_DIR"

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigSection(Enum):
    """Enumeration of configuration sections."""
    NUMERICAL = "numerical"
    BOOTSTRAP = "bootstrap"
    PERFORMANCE = "performance"
    LOGGING = "logging"


@dataclass
class NumericalConfig:
    """
    Numerical configuration settings.

    Attributes:
        rank_tolerance: Singular value threshold passed to
            ``numpy.linalg.matrix_rank`` (None uses NumPy's default)
        symmetry_tolerance: Absolute tolerance used when checking that a
            covariance matrix is symmetric
    """
    rank_tolerance: Optional[float] = None
    symmetry_tolerance: float = 1e-10


@dataclass
class BootstrapConfig:
    """
    Resampling defaults.

    Attributes:
        n_bootstraps: Default number of bootstrap replications
        confidence_level: Default level for percentile confidence intervals
    """
    n_bootstraps: int = 1000
    confidence_level: float = 0.95


@dataclass
class PerformanceConfig:
    """
    Performance configuration settings.

    Attributes:
        max_workers: Default number of threads used to re-fit bootstrap draws
    """
    max_workers: int = 1


@dataclass
class LoggingConfig:
    """
    Logging configuration settings.

    Attributes:
        log_level: Level of the package logger
        log_format: Format string for log messages
        log_date_format: Format string for log message timestamps
        console_logging: Whether to attach a console handler
    """
    log_level: LogLevel = "WARNING"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    console_logging: bool = True


@dataclass
class HACRegConfig:
    """
    Complete configuration for hacreg.

    Attributes:
        numerical: Numerical configuration settings
        bootstrap: Resampling defaults
        performance: Performance configuration settings
        logging: Logging configuration settings
    """
    numerical: NumericalConfig = field(default_factory=NumericalConfig)
    bootstrap: BootstrapConfig = field(default_factory=BootstrapConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTION_TYPES = {
    "numerical": NumericalConfig,
    "bootstrap": BootstrapConfig,
    "performance": PerformanceConfig,
    "logging": LoggingConfig,
}


def _coerce(current_value: Any, value: Any) -> Any:
    """Convert ``value`` to the type of ``current_value``.

    Options whose default is None (``rank_tolerance``) accept floats.
    """
    if current_value is None:
        if value is None or (isinstance(value, str) and value.lower() in ("none", "")):
            return None
        return float(value)
    value_type = type(current_value)
    if value_type is bool and isinstance(value, str):
        return value.lower() in ('true', 'yes', '1', 'y')
    if value_type is not type(value):
        return value_type(value)
    return value


class ConfigManager:
    """
    Configuration manager for hacreg.

    Holds the active configuration and provides methods to get, set, reset
    and persist options.

    Attributes:
        _config: The current configuration object
        _initialized: Whether the configuration manager has been initialized
        _config_file: Path to the user configuration file
    """

    def __init__(self):
        """Initialize the configuration manager with default settings."""
        self._config = HACRegConfig()
        self._initialized = False
        self._config_file: Optional[Path] = None
        self._modified_keys = set()

    def initialize(self) -> None:
        """
        Initialize the configuration manager.

        Loads the user configuration file if one exists, applies environment
        variable overrides, validates the result and configures logging.
        """
        if self._initialized:
            return

        self._config_file = self.get_user_config_dir() / DEFAULT_CONFIG_FILENAME
        self._load_user_config()
        self._apply_env_overrides()
        self._validate_config()
        self._setup_logging()

        self._initialized = True
        logger.debug("Configuration manager initialized")

    def get_user_config_dir(self) -> Path:
        """Return the user configuration directory (not created here)."""
        env_config_dir = os.environ.get(USER_CONFIG_DIR_ENV)
        if env_config_dir:
            return Path(env_config_dir)
        return Path.home() / ".hacreg"

    def _load_user_config(self) -> None:
        """Load the user configuration file when present."""
        if not self._config_file or not self._config_file.exists():
            logger.debug("No user configuration file found")
            return

        try:
            with open(self._config_file, 'r') as f:
                user_config = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load user configuration: {e}")
            return

        self._update_from_dict(user_config)
        logger.debug(f"Loaded user configuration from {self._config_file}")

    def _apply_env_overrides(self) -> None:
        """Apply ``HACREG_<SECTION>_<OPTION>`` environment variables."""
        for env_var, value in os.environ.items():
            if not env_var.startswith(CONFIG_ENV_PREFIX):
                continue

            key = env_var[len(CONFIG_ENV_PREFIX):]
            parts = key.lower().split('_', 1)
            if len(parts) != 2:
                continue

            section, option = parts
            try:
                ConfigSection(section)
            except ValueError:
                continue

            section_obj = getattr(self._config, section)
            if not hasattr(section_obj, option):
                continue

            try:
                typed_value = _coerce(getattr(section_obj, option), value)
            except (TypeError, ValueError) as e:
                logger.warning(f"Failed to apply environment override {env_var}: {e}")
                continue

            setattr(section_obj, option, typed_value)
            logger.debug(f"Applied environment override: {env_var}={value}")

    def _setup_logging(self) -> None:
        """Configure the ``hacreg`` package logger from the logging section."""
        package_logger = logging.getLogger("hacreg")

        for handler in package_logger.handlers[:]:
            package_logger.removeHandler(handler)

        package_logger.setLevel(getattr(logging, self._config.logging.log_level))

        if self._config.logging.console_logging:
            formatter = logging.Formatter(
                fmt=self._config.logging.log_format,
                datefmt=self._config.logging.log_date_format
            )
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            package_logger.addHandler(console_handler)

    def _validate_config(self) -> None:
        """Replace out-of-range values with defaults, logging each one."""
        numerical = self._config.numerical
        if numerical.rank_tolerance is not None and numerical.rank_tolerance < 0:
            logger.warning(f"Invalid rank_tolerance: {numerical.rank_tolerance}, using None")
            numerical.rank_tolerance = None
        if numerical.symmetry_tolerance < 0:
            logger.warning(f"Invalid symmetry_tolerance: {numerical.symmetry_tolerance}, using 1e-10")
            numerical.symmetry_tolerance = 1e-10

        bootstrap = self._config.bootstrap
        if bootstrap.n_bootstraps <= 0:
            logger.warning(f"Invalid n_bootstraps: {bootstrap.n_bootstraps}, must be positive")
            bootstrap.n_bootstraps = 1000
        if not 0 < bootstrap.confidence_level < 1:
            logger.warning(f"Invalid confidence_level: {bootstrap.confidence_level}, using 0.95")
            bootstrap.confidence_level = 0.95

        if self._config.performance.max_workers < 1:
            logger.warning(f"Invalid max_workers: {self._config.performance.max_workers}, using 1")
            self._config.performance.max_workers = 1

        if self._config.logging.log_level not in _VALID_LOG_LEVELS:
            logger.warning(f"Invalid log level: {self._config.logging.log_level}, using WARNING")
            self._config.logging.log_level = "WARNING"

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """
        Update the configuration from a dictionary.

        Unknown sections or options and values that cannot be converted are
        logged and skipped.

        Args:
            config_dict: Dictionary containing configuration values
        """
        for section_name, section_dict in config_dict.items():
            if section_name not in _SECTION_TYPES or not isinstance(section_dict, dict):
                logger.warning(f"Unknown configuration section: {section_name}")
                continue

            section = getattr(self._config, section_name)
            for option_name, option_value in section_dict.items():
                if not hasattr(section, option_name):
                    logger.warning(f"Unknown configuration option: {section_name}.{option_name}")
                    continue
                try:
                    setattr(section, option_name,
                            _coerce(getattr(section, option_name), option_value))
                except (TypeError, ValueError) as e:
                    logger.warning(f"Failed to set {section_name}.{option_name}: {e}")

    def save_user_config(self) -> None:
        """Write the current configuration to the user configuration file."""
        if not self._config_file:
            self._config_file = self.get_user_config_dir() / DEFAULT_CONFIG_FILENAME

        self._config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_file, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.debug(f"Saved user configuration to {self._config_file}")

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the configuration to a dictionary.

        Returns:
            Dictionary representation of the configuration
        """
        result = {}
        for section_name in _SECTION_TYPES:
            section = getattr(self._config, section_name)
            result[section_name] = {
                field_name: getattr(section, field_name)
                for field_name in section.__dataclass_fields__
            }
        return result

    def get(self, section: str, option: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            section: The configuration section
            option: The configuration option
            default: Default value if the option is not found

        Returns:
            The configuration value, or the default if not found
        """
        if section not in _SECTION_TYPES:
            return default

        section_obj = getattr(self._config, section)
        if not hasattr(section_obj, option):
            return default

        return getattr(section_obj, option)

    def set(self, section: str, option: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            section: The configuration section
            option: The configuration option
            value: The value to set

        Raises:
            ConfigurationError: If the section or option is not found, or the
                value cannot be converted to the option's type
        """
        if section not in _SECTION_TYPES:
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=f"{section}.{option}",
                value=value,
                issue="Section not found"
            )

        section_obj = getattr(self._config, section)
        if not hasattr(section_obj, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue="Option not found"
            )

        try:
            typed_value = _coerce(getattr(section_obj, option), value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to set configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue=str(e)
            ) from e

        setattr(section_obj, option, typed_value)
        self._modified_keys.add(f"{section}.{option}")
        logger.debug(f"Set configuration option: {section}.{option}={value}")

        if section == "logging":
            self._setup_logging()

    def reset(self, section: Optional[str] = None, option: Optional[str] = None) -> None:
        """
        Reset configuration to default values.

        Args:
            section: The configuration section to reset, or None to reset all
            option: The configuration option to reset, or None to reset the entire section

        Raises:
            ConfigurationError: If the section or option is not found
        """
        if section is None:
            self._config = HACRegConfig()
            self._modified_keys.clear()
            logger.debug("Reset all configuration to defaults")
            self._setup_logging()
            return

        if section not in _SECTION_TYPES:
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=section,
                issue="Section not found"
            )

        defaults = _SECTION_TYPES[section]()
        if option is None:
            setattr(self._config, section, defaults)
            self._modified_keys = {
                key for key in self._modified_keys if not key.startswith(f"{section}.")
            }
            logger.debug(f"Reset configuration section: {section}")
            if section == "logging":
                self._setup_logging()
            return

        if not hasattr(defaults, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                issue="Option not found"
            )

        setattr(getattr(self._config, section), option, getattr(defaults, option))
        self._modified_keys.discard(f"{section}.{option}")
        logger.debug(f"Reset configuration option: {section}.{option}")

        if section == "logging":
            self._setup_logging()

    def get_modified_options(self) -> Dict[str, Any]:
        """Return modified options mapped to their current values."""
        result = {}
        for key in sorted(self._modified_keys):
            section, option = key.split(".", 1)
            result[key] = self.get(section, option)
        return result


# Global configuration manager instance
_config_manager = ConfigManager()


def initialize_config() -> None:
    """Initialize the global configuration manager."""
    _config_manager.initialize()


def get_config(section: str, option: str, default: Any = None) -> Any:
    """
    Get a configuration value.

    Args:
        section: The configuration section
        option: The configuration option
        default: Default value if the option is not found

    Returns:
        The configuration value, or the default if not found

    Examples:
        >>> get_config("bootstrap", "n_bootstraps")
        1000
    """
    if not _config_manager._initialized:
        initialize_config()

    return _config_manager.get(section, option, default)


def set_config(section: str, option: str, value: Any) -> None:
    """
    Set a configuration value.

    Args:
        section: The configuration section
        option: The configuration option
        value: The value to set

    Raises:
        ConfigurationError: If the section or option is not found
    """
    if not _config_manager._initialized:
        initialize_config()

    _config_manager.set(section, option, value)


def reset_config(section: Optional[str] = None, option: Optional[str] = None) -> None:
    """
    Reset configuration to default values.

    Args:
        section: The configuration section to reset, or None to reset all
        option: The configuration option to reset, or None to reset the entire section
    """
    if not _config_manager._initialized:
        initialize_config()

    _config_manager.reset(section, option)


def save_config() -> None:
    """Save the current configuration to the user configuration file."""
    if not _config_manager._initialized:
        initialize_config()

    _config_manager.save_user_config()


def get_config_manager() -> ConfigManager:
    """Return the global configuration manager."""
    if not _config_manager._initialized:
        initialize_config()

    return _config_manager


def get_modified_options() -> Dict[str, Any]:
    """Return modified configuration options with their current values."""
    if not _config_manager._initialized:
        initialize_config()

    return _config_manager.get_modified_options()


def to_dict() -> Dict[str, Any]:
    """Convert the configuration to a dictionary."""
    if not _config_manager._initialized:
        initialize_config()

    return _config_manager.to_dict()


# Initialize the configuration when the module is imported
initialize_config()
