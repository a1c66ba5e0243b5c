"""
DropForge - Asset Storage and Publishing

Blob store clients, the manifest codec and the asset publisher.
"""

from .storage import (
    Asset,
    BlobRef,
    BlobStatus,
    BlobStore,
    LocalBlobStore,
    detect_content_type
)

from .walrus import WalrusBlobStore

from .manifest import Manifest, fetch_manifest

from .publisher import AssetPublisher, PublishResult

__all__ = [
    # Storage
    "Asset",
    "BlobRef",
    "BlobStatus",
    "BlobStore",
    "LocalBlobStore",
    "WalrusBlobStore",
    "detect_content_type",

    # Publishing
    "Manifest",
    "fetch_manifest",
    "AssetPublisher",
    "PublishResult",
]
