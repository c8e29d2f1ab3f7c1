"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
YAML configuration file (~/.tierlookup/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from tierlookup.domain.models.common import BackoffPolicy

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".tierlookup"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "TIERLOOKUP_"

DEFAULTS: Dict[str, Any] = {
    'api.base_url': "https://mctiers.com/api/v2",
    'api.profile_base_url': "https://mctiers.com/player",
    'api.timeout_seconds': 10.0,
    'cache.ttl_seconds': 3 * 60,
    'cache.dir': str(DEFAULT_CONFIG_DIR / "cache"),
    'scheduler.min_interval_seconds': 1.0,
    'retry.max_attempts': 4,
    'retry.base_delay_seconds': 0.5,
    'retry.max_jitter_seconds': 0.3,
    'avatar.base_url': "https://crafatar.com/avatars",
    'avatar.size': 64,
    'avatar.dir': str(DEFAULT_CONFIG_DIR / "avatars"),
    'logging.level': "WARNING",
    'logging.format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
}

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flattens nested YAML mappings into dotted keys ({'a': {'b': 1}} -> {'a.b': 1})."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(_flatten(value, dotted))
        else:
            flat[dotted] = value
    return flat


def env_var_name(key: str) -> str:
    """Maps a dotted config key to its environment variable name."""
    return f"{ENV_PREFIX}{key.upper().replace('.', '_')}"


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file (Medium priority)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        # override=False: real environment variables take precedence
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug(".env file not found at or above current directory.")

    # 3. Environment Variables (Highest priority) are handled in get_config

    _loaded = True
    logger.debug("Configuration loading process completed.")


def _coerce(value: str) -> Any:
    """Converts environment strings to bool/int/float where they look like one."""
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except (ValueError, TypeError):
        return value


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable (TIERLOOKUP_<KEY>)
    3. YAML config
    4. Built-in default, then ``default``

    Args:
        key: The dotted configuration key (e.g. 'cache.ttl_seconds')
        default: Value to return if the key has no built-in default

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = env_var_name(key)
    if env_key in os.environ:
        return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    if key in DEFAULTS:
        return DEFAULTS[key]

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def set_config(key: str, value: Any) -> None:
    """Sets a configuration value for the running process.

    Args:
        key: Configuration key (e.g., 'logging.level')
        value: Value to set
    """
    logger.debug(f"Setting config: {key} = {value}")
    _config[key] = value
    os.environ[env_var_name(key)] = str(value)


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


# --- Convenience Functions ---

def get_api_base_url() -> str:
    return str(get_config('api.base_url')).rstrip('/')


def get_profile_base_url() -> str:
    return str(get_config('api.profile_base_url')).rstrip('/')


def get_cache_ttl_seconds() -> float:
    return float(get_config('cache.ttl_seconds'))


def get_cache_dir() -> Path:
    return Path(str(get_config('cache.dir'))).expanduser()


def get_min_request_interval() -> float:
    """Minimum gap in seconds between the start of two outbound requests."""
    return float(get_config('scheduler.min_interval_seconds'))


def get_backoff_settings() -> BackoffPolicy:
    """Returns the retry settings as keyword arguments for BackoffFetcher."""
    return BackoffPolicy(
        max_attempts=int(get_config('retry.max_attempts')),
        base_delay=float(get_config('retry.base_delay_seconds')),
        max_jitter=float(get_config('retry.max_jitter_seconds')),
    )


def get_avatar_dir() -> Path:
    return Path(str(get_config('avatar.dir'))).expanduser()


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")


# Load configuration when the module is imported
load_configuration()
