"""
DropForge - Asset Publisher

Turns an ordered batch of images into a single manifest blob. Uploads are
strictly sequential: each asset is stored and checked before the next one
starts, so a failure is always attributable to one input index. Blobs
uploaded before a failure are left in place (the store has no delete).
"""

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..exceptions import (
    BlobStoreError,
    ManifestEmpty,
    ManifestIntegrityError,
    NotFound,
    VerificationFailed,
)
from .manifest import Manifest
from .storage import Asset, BlobRef, BlobStore

MANIFEST_CONTENT_TYPE = "application/json"

ProgressCallback = Callable[[int, int, BlobRef], None]


@dataclass
class PublishResult:
    """Outcome of a successful publish."""

    manifest_ref: BlobRef
    manifest: Manifest
    asset_refs: List[BlobRef] = field(default_factory=list)

    @property
    def manifest_url(self) -> str:
        return self.manifest_ref.url

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "manifest": self.manifest_ref.to_dict(),
            "token_count": len(self.manifest),
            "assets": [ref.to_dict() for ref in self.asset_refs],
        }


class AssetPublisher:
    """Publishes asset batches and their manifest to a blob store."""

    def __init__(self, store: BlobStore, verify_content: bool = False):
        """
        Initialize publisher.

        Args:
            store: Blob store to publish to
            verify_content: Read every asset back and compare its sha256
                instead of only probing for existence
        """
        self.store = store
        self.verify_content = verify_content
        self.logger = logging.getLogger(__name__)

    def publish(self, assets: Sequence[Asset],
                progress: Optional[ProgressCallback] = None) -> BlobRef:
        """
        Publish assets and return the manifest's reference.

        Raises:
            ValueError: If no assets are given
            VerificationFailed: If an uploaded asset cannot be read back
            ManifestIntegrityError: If the uploaded manifest differs from the local one
            StoreUnavailable, StoreRejected: Propagated from the store
        """
        return self.publish_detailed(assets, progress).manifest_ref

    def publish_detailed(self, assets: Sequence[Asset],
                         progress: Optional[ProgressCallback] = None) -> PublishResult:
        """Publish assets, returning the manifest and every asset reference."""
        if not assets:
            raise ValueError("At least one asset is required")

        total = len(assets)
        asset_refs: List[BlobRef] = []

        for index, asset in enumerate(assets):
            ref = self.store.put(asset.content, asset.content_type)
            self._verify_asset(index, asset, ref)
            asset_refs.append(ref)

            self.logger.info(f"Published asset {index + 1}/{total} as {ref.blob_id}")
            if progress:
                progress(index, total, ref)

        manifest = Manifest(urls=[ref.url for ref in asset_refs])
        manifest_ref = self.store.put(manifest.to_bytes(), MANIFEST_CONTENT_TYPE)
        self._verify_manifest(manifest, manifest_ref)

        self.logger.info(f"Published manifest {manifest_ref.blob_id} with {total} entries")
        return PublishResult(manifest_ref=manifest_ref, manifest=manifest, asset_refs=asset_refs)

    def _verify_asset(self, index: int, asset: Asset, ref: BlobRef):
        """Read-back check for one uploaded asset."""
        try:
            if self.verify_content:
                stored = self.store.get(ref)
                ok = hashlib.sha256(stored).hexdigest() == asset.sha256
            else:
                ok = self.store.exists(ref)
        except (BlobStoreError, NotFound) as e:
            raise VerificationFailed(index, ref.blob_id, f"Verification failed for asset {index}: {e}") from e

        if not ok:
            raise VerificationFailed(index, ref.blob_id)

    def _verify_manifest(self, manifest: Manifest, ref: BlobRef):
        """Read the manifest back and compare it with what was uploaded."""
        try:
            remote = Manifest.from_json(self.store.get(ref))
        except NotFound as e:
            raise ManifestIntegrityError(f"Manifest {ref.blob_id} is not readable") from e
        except ManifestEmpty as e:
            raise ManifestIntegrityError(f"Manifest {ref.blob_id} read back malformed: {e}") from e

        if not remote.matches(manifest):
            raise ManifestIntegrityError(
                f"Manifest {ref.blob_id} mismatch: uploaded {len(manifest)} entries, "
                f"read back {len(remote)}"
            )
