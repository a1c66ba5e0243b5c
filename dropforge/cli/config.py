"""
DropForge - CLI Configuration

Hierarchical configuration for the command line: built-in defaults, a YAML
or JSON file (explicit or found on the search path), then DROPFORGE_*
environment variables. The merged result is turned into a NetworkConfig
that is handed to every component explicitly.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..network.config import DEFAULT_NETWORK, ENV_PREFIX, NetworkConfig

# Configuration file locations in order of precedence (highest to lowest)
CONFIG_SEARCH_PATHS = [
    Path.cwd() / '.dropforge.yml',
    Path.cwd() / '.dropforge.json',
    Path.cwd() / 'dropforge.config.yml',
    Path.cwd() / 'dropforge.config.json',
    Path.home() / '.dropforge' / 'config.yml',
    Path.home() / '.dropforge' / 'config.json',
]

DEFAULT_CONFIG = {
    'network': {
        'name': DEFAULT_NETWORK,
        'rpc_url': None,
        'package_id': None,
        'registry_id': None,
        'timeout': 30,
    },
    'walrus': {
        'publisher_url': None,
        'aggregator_url': None,
        'epochs': 5,
    },
    'app': {
        'url': None,
    },
    'cli': {
        'output_format': 'table',
        'max_workers': 4,
        'verify_content': False,
    },
}

# Environment variables understood by the CLI and their config paths
ENV_MAPPING = {
    f'{ENV_PREFIX}NETWORK': 'network.name',
    f'{ENV_PREFIX}RPC_URL': 'network.rpc_url',
    f'{ENV_PREFIX}PACKAGE_ID': 'network.package_id',
    f'{ENV_PREFIX}REGISTRY_ID': 'network.registry_id',
    f'{ENV_PREFIX}TIMEOUT': 'network.timeout',
    f'{ENV_PREFIX}PUBLISHER_URL': 'walrus.publisher_url',
    f'{ENV_PREFIX}AGGREGATOR_URL': 'walrus.aggregator_url',
    f'{ENV_PREFIX}EPOCHS': 'walrus.epochs',
    f'{ENV_PREFIX}APP_URL': 'app.url',
    f'{ENV_PREFIX}OUTPUT_FORMAT': 'cli.output_format',
    f'{ENV_PREFIX}MAX_WORKERS': 'cli.max_workers',
}


class ConfigurationError(Exception):
    """Raised when a configuration file cannot be read."""
    pass


class ConfigurationManager:
    """Manages hierarchical configuration with environment variable support."""

    def __init__(self, config_file: Optional[str] = None,
                 search_paths: Optional[List[Path]] = None,
                 environ: Optional[Dict[str, str]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Explicit configuration file path
            search_paths: Files to try when no explicit file is given
            environ: Environment mapping (os.environ if None)
        """
        self.logger = logging.getLogger(__name__)
        self.config_file = config_file
        self.search_paths = CONFIG_SEARCH_PATHS if search_paths is None else search_paths
        self.environ = os.environ if environ is None else environ
        self._config_cache = None
        self._config_sources: List[str] = []

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from all sources in hierarchical order.

        Returns:
            Merged configuration dictionary

        Raises:
            ConfigurationError: If an explicit config file is missing or unreadable
        """
        if self._config_cache is not None:
            return self._config_cache

        configs = [DEFAULT_CONFIG]
        self._config_sources = ["defaults"]

        if self.config_file:
            path = Path(self.config_file)
            if not path.exists():
                raise ConfigurationError(f"Config file not found: {path}")
            configs.append(self._load_config_file(path))
            self._config_sources.append(f"file:{path}")
        else:
            for config_path in self.search_paths:
                if config_path.exists():
                    configs.append(self._load_config_file(config_path))
                    self._config_sources.append(f"file:{config_path}")
                    self.logger.debug(f"Loaded config from {config_path}")
                    break  # Use first found config file

        env_config = self._load_environment_variables()
        if env_config:
            configs.append(env_config)
            self._config_sources.append("environment")

        self._config_cache = self._deep_merge(*configs)
        return self._config_cache

    def _load_config_file(self, path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML or JSON file."""
        try:
            with open(path, 'r') as f:
                if path.suffix in ['.yml', '.yaml']:
                    data = yaml.safe_load(f)
                elif path.suffix == '.json':
                    data = json.load(f)
                else:
                    raise ConfigurationError(f"Unknown config file format: {path}")
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load config from {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        return data

    def _load_environment_variables(self) -> Dict[str, Any]:
        """Load configuration from DROPFORGE_* environment variables."""
        env_config: Dict[str, Any] = {}

        for env_name, key_path in ENV_MAPPING.items():
            value = self.environ.get(env_name)
            if value is None or value == '':
                continue

            parts = key_path.split('.')
            current = env_config
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = self._parse_env_value(value)

        return env_config

    def _parse_env_value(self, value: str) -> Union[str, int, bool]:
        """Parse environment variable value to appropriate type."""
        if value.lower() in ['true', 'yes']:
            return True
        elif value.lower() in ['false', 'no']:
            return False

        # Object ids are hex strings and stay strings
        if value.isascii() and value.isdigit():
            return int(value)

        return value

    def _deep_merge(self, *dicts: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge multiple dictionaries."""
        result: Dict[str, Any] = {}

        for dictionary in dicts:
            for key, value in dictionary.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = self._deep_merge(result[key], value)
                elif isinstance(value, dict):
                    result[key] = self._deep_merge(value)
                else:
                    result[key] = value

        return result

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        Args:
            key_path: Dot-separated path (e.g., 'network.rpc_url')
            default: Default value if key not found or null

        Returns:
            Configuration value or default
        """
        current = self.load()

        for key in key_path.split('.'):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default

        return default if current is None else current

    def set(self, key_path: str, value: Any):
        """Set configuration value by dot-notation path."""
        config = self.load()

        keys = key_path.split('.')
        current = config
        for key in keys[:-1]:
            current = current.setdefault(key, {})

        current[keys[-1]] = value

    def network_config(self, network: Optional[str] = None) -> NetworkConfig:
        """
        Build the NetworkConfig described by this configuration.

        Args:
            network: Network name overriding the configured one

        Raises:
            ValueError: If the network is unknown or a value is invalid
        """
        return NetworkConfig.for_network(
            network or self.get('network.name', DEFAULT_NETWORK),
            rpc_url=self.get('network.rpc_url'),
            package_id=self.get('network.package_id'),
            registry_id=self.get('network.registry_id'),
            timeout=self.get('network.timeout'),
            publisher_url=self.get('walrus.publisher_url'),
            aggregator_url=self.get('walrus.aggregator_url'),
            epochs=self.get('walrus.epochs'),
            app_url=self.get('app.url'),
        )

    def get_sources(self) -> List[str]:
        """Get list of configuration sources that were loaded."""
        self.load()
        return self._config_sources

    def reset(self):
        """Reset configuration cache."""
        self._config_cache = None
        self._config_sources = []
