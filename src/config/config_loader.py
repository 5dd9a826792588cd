"""Configuration loader and validator for the health endpoint service."""

import os
import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Optional


logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration error exception."""
    pass


def _parse_bool(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes', 'on')


# Environment variable to config key mapping
# All environment variables must use the HEALTHZ_ prefix
ENV_VAR_MAPPING = {
    # Health server settings
    'HEALTHZ_SERVER_ENABLED': ('health_server', 'enabled', _parse_bool),
    'HEALTHZ_SERVER_HOST': ('health_server', 'host', str),
    'HEALTHZ_SERVER_PORT': ('health_server', 'port', int),
    'HEALTHZ_SERVER_PATH': ('health_server', 'path', str),

    # Health check settings
    'HEALTHZ_CHECKS_ENABLED': ('health_checks', 'enabled', _parse_bool),
    'HEALTHZ_SELF_CHECK': ('health_checks', 'self_check', _parse_bool),

    # Authentication
    'HEALTHZ_AUTH_TOKEN': ('auth', 'token', str),

    # Logging settings
    'HEALTHZ_LOG_LEVEL': ('logging', 'level', str),
    'HEALTHZ_LOG_DIR': ('logging', 'log_dir', str),
}

DEFAULTS = {
    'health_server': {
        'enabled': True,
        'host': '0.0.0.0',
        'port': 8080,
        'path': '/healthz',
    },
    'health_checks': {
        'enabled': True,
        'self_check': True,
    },
    'auth': {
        'token': '',
    },
    'logging': {
        'level': 'INFO',
        'log_dir': 'logs',
        'max_file_size_mb': 10,
        'backup_count': 5,
    },
}

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def get_env_var(env_var: str, convert_type: type) -> Optional[Any]:
    """
    Get environment variable and convert to specified type.

    Args:
        env_var: Environment variable name
        convert_type: Type conversion function (int, float, str, or callable)

    Returns:
        Converted value or None if not set
    """
    value = os.environ.get(env_var)
    if value is None:
        return None

    try:
        return convert_type(value)
    except (ValueError, TypeError) as e:
        logger.warning(f"Failed to convert environment variable {env_var}={value}: {e}")
        return None


def apply_env_overrides(config: Dict[str, Any]) -> tuple[Dict[str, Any], Dict[str, str]]:
    """
    Apply environment variable overrides to configuration and track which fields were overridden.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (config with overrides applied, dict mapping config paths to env var names)
    """
    logger.debug("Checking for environment variable overrides...")

    env_overridden_paths = {}

    for env_var, mapping_tuple in ENV_VAR_MAPPING.items():
        value = get_env_var(env_var, mapping_tuple[-1])

        if value is not None:
            sections = mapping_tuple[:-1]

            current = config
            for section in sections[:-1]:
                if not isinstance(current.get(section), dict):
                    current[section] = {}
                current = current[section]

            current[sections[-1]] = value

            path = '.'.join(sections)
            env_overridden_paths[path] = env_var
            # Token values are masked
            shown = '***' if env_var == 'HEALTHZ_AUTH_TOKEN' else value
            logger.info(f"Environment variable override: {env_var} -> {path} = {shown}")

    return config, env_overridden_paths


class Config:
    """Configuration manager for the application."""

    def __init__(self, config_path: str = None):
        """
        Initialize configuration from YAML file with environment variable overrides.

        Args:
            config_path: Path to the configuration file (defaults to HEALTHZ_CONFIG_PATH env var or "config.yaml")
        """
        if config_path is None:
            config_path = os.environ.get('HEALTHZ_CONFIG_PATH', 'config.yaml')

        logger.info(f"Loading configuration from: {config_path}")
        self.config_path = Path(config_path)
        self._config = self._load_config()

        self._config, self._env_overridden_paths = apply_env_overrides(self._config)

        self._validate_config()
        logger.info("Configuration loaded and validated successfully")

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file, or start empty if the file doesn't exist."""
        if not self.config_path.exists():
            logger.warning(f"Configuration file not found: {self.config_path}")
            logger.info("Using defaults and environment variables for configuration")
            return {}

        try:
            logger.debug(f"Reading configuration file: {self.config_path}")
            with open(self.config_path, 'r') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file: {e}")
            raise ConfigError(f"Error parsing configuration file: {e}")
        except OSError as e:
            logger.error(f"Unexpected error loading configuration: {type(e).__name__}: {e}")
            raise ConfigError(f"Error loading configuration: {e}")

        if config is None:
            logger.warning("Configuration file is empty, using defaults")
            return {}

        if not isinstance(config, dict):
            logger.error(f"Configuration must be a dictionary, got: {type(config)}")
            raise ConfigError(f"Invalid configuration format: expected dictionary, got {type(config)}")

        logger.debug(f"Configuration sections: {list(config.keys())}")
        return config

    def _section(self, name: str) -> Dict[str, Any]:
        """Return a section merged over its defaults."""
        section = self._config.get(name) or {}
        return {**DEFAULTS[name], **section}

    def _validate_config(self):
        """Validate configuration sections."""
        logger.debug("Validating configuration...")

        for name in DEFAULTS:
            section = self._config.get(name)
            if section is not None and not isinstance(section, dict):
                raise ConfigError(f"'{name}' configuration must be a dictionary")

        server = self._section('health_server')
        try:
            port = int(server['port'])
        except (ValueError, TypeError):
            raise ConfigError(f"health_server.port must be an integer, got: {server['port']!r}")
        if not (1 <= port <= 65535):
            raise ConfigError(f"Invalid health_server.port: {port} (must be between 1 and 65535)")

        path = server['path']
        if not isinstance(path, str) or not path.startswith('/'):
            raise ConfigError(f"health_server.path must start with '/', got: {path!r}")

        token = self.auth['token']
        if token is not None and not isinstance(token, str):
            raise ConfigError("auth.token must be a string")

        level = str(self.logging_config['level']).upper()
        if level not in LOG_LEVELS:
            raise ConfigError(f"Invalid logging.level: {level} (must be one of {', '.join(LOG_LEVELS)})")

        logger.debug("Configuration validation completed successfully")

    @property
    def health_server(self) -> Dict[str, Any]:
        """Get health server configuration."""
        section = self._section('health_server')
        section['port'] = int(section['port'])
        return section

    @property
    def health_checks(self) -> Dict[str, Any]:
        """Get health check configuration."""
        return self._section('health_checks')

    @property
    def auth(self) -> Dict[str, Any]:
        """Get authentication configuration."""
        return self._section('auth')

    @property
    def logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self._section('logging')

    @property
    def env_overridden_paths(self) -> Dict[str, str]:
        """
        Get mapping of config paths to environment variable names that override them.

        Returns:
            Dictionary mapping config paths (e.g., 'health_server.port') to env var names (e.g., 'HEALTHZ_SERVER_PORT')
        """
        return self._env_overridden_paths
