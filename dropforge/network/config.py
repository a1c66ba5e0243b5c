"""
DropForge - Network Configuration

Explicit configuration record for the ledger and blob store endpoints.
A NetworkConfig is built once and passed into every component; nothing in
the package selects a network through process-wide state.
"""

import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional


# Well-known deployments. Mainnet and devnet ids must come from
# configuration or the environment.
NETWORKS: Dict[str, Dict[str, Any]] = {
    "mainnet": {
        "rpc_url": "https://fullnode.mainnet.sui.io:443",
        "package_id": None,
        "registry_id": None,
        "publisher_url": "https://publisher.walrus.space",
        "aggregator_url": "https://aggregator.walrus.space",
    },
    "testnet": {
        "rpc_url": "https://fullnode.testnet.sui.io:443",
        "package_id": "0xaf8cf0e00bf66206133c890873eeaa0cdb0a9c5de1164a4cf6c16e284cb56ead",
        "registry_id": "0x22eff8cb628e96baaf4a42fdf986013dfdb4600ef0b17bd5c354e0d789cd1cc7",
        "publisher_url": "https://publisher.walrus-testnet.walrus.space",
        "aggregator_url": "https://aggregator.walrus-testnet.walrus.space",
    },
    "devnet": {
        "rpc_url": "https://fullnode.devnet.sui.io:443",
        "package_id": None,
        "registry_id": None,
        "publisher_url": "https://publisher.walrus-testnet.walrus.space",
        "aggregator_url": "https://aggregator.walrus-testnet.walrus.space",
    },
}

DEFAULT_NETWORK = "testnet"
ENV_PREFIX = "DROPFORGE_"


@dataclass(frozen=True)
class NetworkConfig:
    """Endpoints and on-chain identifiers for one deployment."""
    network: str = DEFAULT_NETWORK
    rpc_url: str = NETWORKS[DEFAULT_NETWORK]["rpc_url"]
    package_id: Optional[str] = NETWORKS[DEFAULT_NETWORK]["package_id"]
    registry_id: Optional[str] = NETWORKS[DEFAULT_NETWORK]["registry_id"]
    publisher_url: str = NETWORKS[DEFAULT_NETWORK]["publisher_url"]
    aggregator_url: str = NETWORKS[DEFAULT_NETWORK]["aggregator_url"]
    epochs: int = 5
    timeout: int = 30
    app_url: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.epochs < 1:
            raise ValueError(f"epochs must be positive, got {self.epochs}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @classmethod
    def for_network(cls, network: str, **overrides) -> 'NetworkConfig':
        """
        Build a config from a named preset.

        Args:
            network: One of NETWORKS
            **overrides: Fields replacing the preset values (None values are ignored)

        Raises:
            ValueError: If the network name is unknown
        """
        if network not in NETWORKS:
            raise ValueError(f"Unknown network '{network}', expected one of {sorted(NETWORKS)}")

        values = dict(NETWORKS[network])
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(network=network, **values)

    @classmethod
    def from_env(cls) -> 'NetworkConfig':
        """Create a config from DROPFORGE_* environment variables."""
        network = os.getenv(f"{ENV_PREFIX}NETWORK", DEFAULT_NETWORK)
        epochs = os.getenv(f"{ENV_PREFIX}EPOCHS")
        timeout = os.getenv(f"{ENV_PREFIX}TIMEOUT")

        return cls.for_network(
            network,
            rpc_url=os.getenv(f"{ENV_PREFIX}RPC_URL"),
            package_id=os.getenv(f"{ENV_PREFIX}PACKAGE_ID"),
            registry_id=os.getenv(f"{ENV_PREFIX}REGISTRY_ID"),
            publisher_url=os.getenv(f"{ENV_PREFIX}PUBLISHER_URL"),
            aggregator_url=os.getenv(f"{ENV_PREFIX}AGGREGATOR_URL"),
            app_url=os.getenv(f"{ENV_PREFIX}APP_URL"),
            epochs=int(epochs) if epochs else None,
            timeout=int(timeout) if timeout else None,
        )

    def with_overrides(self, **overrides) -> 'NetworkConfig':
        """Return a copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def require_package(self) -> str:
        """Return the package id or fail if the deployment has none configured."""
        if not self.package_id:
            raise ValueError(f"No dropforge package id configured for {self.network}")
        return self.package_id

    def require_registry(self) -> str:
        """Return the registry id or fail if the deployment has none configured."""
        if not self.registry_id:
            raise ValueError(f"No dropforge registry id configured for {self.network}")
        return self.registry_id

    def move_target(self, function: str, module: str = "dropforge") -> str:
        """Fully qualified Move call target, e.g. 0xabc::dropforge::mint_nft."""
        return f"{self.require_package()}::{module}::{function}"

    def mint_page_url(self, collection_id: str) -> Optional[str]:
        """Shareable mint page URL for a collection, when an app URL is configured."""
        if not self.app_url:
            return None
        return f"{self.app_url.rstrip('/')}/mint/{collection_id}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "network": self.network,
            "rpc_url": self.rpc_url,
            "package_id": self.package_id,
            "registry_id": self.registry_id,
            "publisher_url": self.publisher_url,
            "aggregator_url": self.aggregator_url,
            "epochs": self.epochs,
            "timeout": self.timeout,
            "app_url": self.app_url,
        }
