"""
DropForge - Blob Storage

Content-addressed blob storage abstraction: the BlobRef/Asset value types,
the BlobStore interface used by the publisher and the reconstructor, and a
local filesystem store for offline staging.
"""

import base64
import hashlib
import logging
import mimetypes
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import unquote, urlparse

from ..exceptions import NotFound, StoreRejected, StoreUnavailable


class BlobStatus(str, Enum):
    """How the store reported an upload."""
    NEWLY_CREATED = "newly_created"
    ALREADY_CERTIFIED = "already_certified"
    STORED = "stored"


@dataclass(frozen=True)
class BlobRef:
    """Content identifier issued by a blob store, with its public read URL."""

    blob_id: str
    url: str
    status: BlobStatus = BlobStatus.STORED
    object_id: Optional[str] = None
    size: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        result = {
            "blob_id": self.blob_id,
            "url": self.url,
            "status": self.status.value,
        }
        if self.object_id:
            result["object_id"] = self.object_id
        if self.size is not None:
            result["size"] = self.size
        return result


@dataclass
class Asset:
    """Raw bytes of one token image plus its media type."""

    content: bytes
    content_type: str = "application/octet-stream"
    filename: Optional[str] = None

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'Asset':
        """Load an asset from disk, detecting its media type."""
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        content = file_path.read_bytes()
        content_type = detect_content_type(file_path) or detect_content_type(content)
        return cls(
            content=content,
            content_type=content_type or "application/octet-stream",
            filename=file_path.name
        )

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def sha256(self) -> str:
        return hashlib.sha256(self.content).hexdigest()


def detect_content_type(content: Union[bytes, str, Path]) -> Optional[str]:
    """Detect content type from a filename or from magic numbers."""
    if isinstance(content, (str, Path)):
        content_type, _ = mimetypes.guess_type(str(content))
        return content_type

    if content.startswith(b'\xff\xd8\xff'):
        return 'image/jpeg'
    elif content.startswith(b'\x89PNG\r\n\x1a\n'):
        return 'image/png'
    elif content.startswith(b'GIF8'):
        return 'image/gif'
    elif content.startswith(b'RIFF') and b'WEBP' in content[:12]:
        return 'image/webp'
    elif content.lstrip().startswith(b'<svg'):
        return 'image/svg+xml'

    return None


def content_blob_id(content: bytes) -> str:
    """Deterministic 43-character URL-safe identifier derived from sha256."""
    digest = hashlib.sha256(content).digest()
    return base64.urlsafe_b64encode(digest).decode('ascii').rstrip('=')


class BlobStore(ABC):
    """
    Opaque content-addressed PUT/GET service.

    Implementations never retry; transport failures surface as
    StoreUnavailable, refused uploads as StoreRejected and missing blobs
    as NotFound.
    """

    @abstractmethod
    def put(self, content: bytes, content_type: Optional[str] = None) -> BlobRef:
        """Store bytes and return their reference."""
        pass

    @abstractmethod
    def get(self, ref: Union[BlobRef, str]) -> bytes:
        """Read a blob by reference or blob id."""
        pass

    @abstractmethod
    def exists(self, ref: Union[BlobRef, str]) -> bool:
        """Check whether a blob is readable."""
        pass

    @abstractmethod
    def public_url(self, blob_id: str) -> str:
        """Public read URL for a blob id."""
        pass

    @abstractmethod
    def fetch_url(self, url: str) -> bytes:
        """Read content from a fully qualified URL."""
        pass

    @staticmethod
    def blob_id_of(ref: Union[BlobRef, str]) -> str:
        return ref.blob_id if isinstance(ref, BlobRef) else ref


class LocalBlobStore(BlobStore):
    """Local filesystem storage keyed by content hash."""

    def __init__(self, base_path: Union[str, Path], max_size: Optional[int] = None):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.max_size = max_size
        self.logger = logging.getLogger(__name__)

    def _path(self, blob_id: str) -> Path:
        return self.base_path / blob_id

    def put(self, content: bytes, content_type: Optional[str] = None) -> BlobRef:
        """Store content locally."""
        if self.max_size is not None and len(content) > self.max_size:
            raise StoreRejected(
                f"Blob of {len(content)} bytes exceeds limit of {self.max_size} bytes",
                status_code=413
            )

        blob_id = content_blob_id(content)
        file_path = self._path(blob_id)
        status = BlobStatus.ALREADY_CERTIFIED if file_path.exists() else BlobStatus.NEWLY_CREATED

        try:
            file_path.write_bytes(content)
        except OSError as e:
            raise StoreUnavailable(f"Failed to write blob {blob_id}: {e}") from e

        self.logger.debug(f"Stored {len(content)} bytes as {blob_id} ({status.value})")
        return BlobRef(
            blob_id=blob_id,
            url=self.public_url(blob_id),
            status=status,
            size=len(content)
        )

    def get(self, ref: Union[BlobRef, str]) -> bytes:
        """Retrieve content from local storage."""
        blob_id = self.blob_id_of(ref)
        file_path = self._path(blob_id)

        if not file_path.exists():
            raise NotFound(blob_id)

        try:
            return file_path.read_bytes()
        except OSError as e:
            raise StoreUnavailable(f"Failed to read blob {blob_id}: {e}") from e

    def exists(self, ref: Union[BlobRef, str]) -> bool:
        """Check if blob exists locally."""
        return self._path(self.blob_id_of(ref)).exists()

    def public_url(self, blob_id: str) -> str:
        return self._path(blob_id).absolute().as_uri()

    def fetch_url(self, url: str) -> bytes:
        """Read a file:// URL; only URLs inside this store are readable."""
        parsed = urlparse(url)
        if parsed.scheme != "file":
            raise NotFound(url, f"Local store cannot fetch {url}")

        file_path = Path(unquote(parsed.path))
        if file_path.parent.resolve() != self.base_path.resolve():
            raise NotFound(url, f"{url} is outside the local store")
        return self.get(file_path.name)
