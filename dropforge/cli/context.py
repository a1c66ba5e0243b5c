"""
DropForge - CLI Context

Shared state for CLI commands: configuration, logging, output formatting
and lazily built network clients.
"""

import functools
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click

from ..exceptions import DropForgeError
from ..network.config import NetworkConfig
from ..network.rpc import RPCError, SuiRPCClient
from ..nft.storage import BlobStore, LocalBlobStore
from ..nft.walrus import WalrusBlobStore
from .config import ConfigurationError, ConfigurationManager
from .output import OutputFormatter


class CLIContext:
    """Global CLI context for sharing state across commands."""

    _log_handler: Optional[logging.Handler] = None

    def __init__(self):
        self.config_file: Optional[str] = None
        self.network: Optional[str] = None
        self.output_format: Optional[str] = None
        self.verbose: int = 0
        self.config_manager: Optional[ConfigurationManager] = None
        self.logger = logging.getLogger('dropforge.cli')
        self._network_config: Optional[NetworkConfig] = None
        self._ledger: Optional[SuiRPCClient] = None

    def setup_logging(self):
        """Configure logging based on verbosity level."""
        log_levels = {
            0: logging.WARNING,
            1: logging.INFO,
            2: logging.DEBUG
        }

        level = log_levels.get(min(self.verbose, 2), logging.DEBUG)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        # One handler per invocation, bound to the current stderr
        package_logger = logging.getLogger('dropforge')
        package_logger.setLevel(level)
        if CLIContext._log_handler is not None:
            package_logger.removeHandler(CLIContext._log_handler)

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
        CLIContext._log_handler = handler

        # Suppress verbose third-party logs unless in debug mode
        if self.verbose < 2:
            logging.getLogger('requests').setLevel(logging.WARNING)
            logging.getLogger('urllib3').setLevel(logging.WARNING)

    def load_config(self):
        """Load configuration from the explicit file or the search path."""
        self.config_manager = ConfigurationManager(self.config_file)
        self.config_manager.load()
        self.logger.debug(f"Configuration sources: {self.config_manager.get_sources()}")

    @property
    def network_config(self) -> NetworkConfig:
        if self._network_config is None:
            if self.config_manager is None:
                self.load_config()
            self._network_config = self.config_manager.network_config(self.network)
        return self._network_config

    def get_config(self, key: str, default: Any = None) -> Any:
        """Get configuration value with fallback to default."""
        if self.config_manager is None:
            return default
        return self.config_manager.get(key, default)

    def ledger(self) -> SuiRPCClient:
        """Ledger client for the configured network."""
        if self._ledger is None:
            self._ledger = SuiRPCClient(self.network_config)
        return self._ledger

    def store(self, local_dir: Optional[str] = None) -> BlobStore:
        """Walrus store for the configured network, or a local store when a directory is given."""
        if local_dir:
            return LocalBlobStore(Path(local_dir))
        return WalrusBlobStore(self.network_config)

    @property
    def format_type(self) -> str:
        return self.output_format or self.get_config('cli.output_format', 'table')

    def output(self, data: Any):
        """Write data to stdout in the selected format."""
        click.echo(OutputFormatter(self.format_type).format(data))

    def close(self):
        if self._ledger is not None:
            self._ledger.close()
            self._ledger = None


pass_context = click.make_pass_decorator(CLIContext, ensure=True)


def handle_cli_error(func):
    """Decorator turning library errors into click errors."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (DropForgeError, RPCError, ConfigurationError, ValueError) as e:
            ctx = click.get_current_context().find_object(CLIContext)
            if ctx and ctx.verbose >= 2:
                ctx.logger.exception(f"Command failed: {e}")
            raise click.ClickException(str(e)) from e

    return wrapper
