"""
DropForge - NFT Collection Client

Publishes image batches to a Walrus blob store as an ordered manifest,
resolves the collections an account owns from the on-chain registry,
reconstructs collection state and assembles mint transactions.
"""

from .exceptions import (
    DropForgeError,
    BlobStoreError,
    StoreUnavailable,
    StoreRejected,
    NotFound,
    PublishError,
    VerificationFailed,
    ManifestIntegrityError,
    ManifestEmpty,
    UnrecognizedValueShape,
    RegistryError,
    RegistryUnavailable,
    RegistryMalformed,
    CollectionMalformed,
    ConsistencyWarning,
    TransactionError,
    TransactionAssemblyError,
    TransactionFailed
)

from .network.config import NetworkConfig, NETWORKS

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "NetworkConfig",
    "NETWORKS",

    # Errors
    "DropForgeError",
    "BlobStoreError",
    "StoreUnavailable",
    "StoreRejected",
    "NotFound",
    "PublishError",
    "VerificationFailed",
    "ManifestIntegrityError",
    "ManifestEmpty",
    "UnrecognizedValueShape",
    "RegistryError",
    "RegistryUnavailable",
    "RegistryMalformed",
    "CollectionMalformed",
    "ConsistencyWarning",
    "TransactionError",
    "TransactionAssemblyError",
    "TransactionFailed",
]
