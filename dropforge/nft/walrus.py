"""
DropForge - Walrus Blob Store Client

HTTP client for the Walrus publisher (uploads) and aggregator (reads).
Uploads go to PUT {publisher}/v1/blobs?epochs=N; reads come from
GET {aggregator}/v1/blobs/{blob_id}.
"""

import logging
from typing import Any, Optional, Tuple, Union

import requests
from requests.adapters import HTTPAdapter

from ..exceptions import NotFound, StoreRejected, StoreUnavailable
from ..network.config import NetworkConfig
from .storage import BlobRef, BlobStatus, BlobStore


def parse_store_response(data: Any) -> Tuple[str, BlobStatus, Optional[str], Optional[int]]:
    """
    Extract the blob id from a publisher response.

    The publisher answers either {"newlyCreated": {"blobObject": {...}}} or
    {"alreadyCertified": {"blobId": ...}}; older deployments return the
    blob object (or just the id) at top level.

    Returns:
        (blob_id, status, object_id, size)

    Raises:
        StoreUnavailable: If no blob id can be found
    """
    if not isinstance(data, dict):
        raise StoreUnavailable(f"Unexpected publisher response: {data!r}")

    newly_created = data.get("newlyCreated")
    if isinstance(newly_created, dict):
        blob_object = newly_created.get("blobObject") or {}
        if blob_object.get("blobId"):
            return (
                blob_object["blobId"],
                BlobStatus.NEWLY_CREATED,
                blob_object.get("id"),
                blob_object.get("size")
            )

    already_certified = data.get("alreadyCertified")
    if isinstance(already_certified, dict) and already_certified.get("blobId"):
        return already_certified["blobId"], BlobStatus.ALREADY_CERTIFIED, None, None

    blob_object = data.get("blobObject")
    if isinstance(blob_object, dict) and blob_object.get("blobId"):
        return blob_object["blobId"], BlobStatus.STORED, blob_object.get("id"), blob_object.get("size")

    if data.get("blobId"):
        return data["blobId"], BlobStatus.STORED, None, None

    raise StoreUnavailable("blobId missing in publisher response")


class WalrusBlobStore(BlobStore):
    """Walrus HTTP publisher/aggregator client."""

    def __init__(self, config: NetworkConfig, session: Optional[requests.Session] = None):
        """
        Initialize Walrus client.

        Args:
            config: Network configuration with publisher/aggregator URLs
            session: Pre-built requests session (a new one if None)
        """
        self.config = config
        self.logger = logging.getLogger(__name__)

        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(max_retries=0)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session

        self.publisher_url = config.publisher_url.rstrip('/')
        self.aggregator_url = config.aggregator_url.rstrip('/')

    def public_url(self, blob_id: str) -> str:
        return f"{self.aggregator_url}/v1/blobs/{blob_id}"

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self.session.request(method, url, timeout=self.config.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            raise StoreUnavailable(f"{method} {url} timed out after {self.config.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise StoreUnavailable(f"{method} {url} failed: {e}") from e

    def put(self, content: bytes, content_type: Optional[str] = None) -> BlobRef:
        """
        Upload bytes to the publisher.

        Raises:
            StoreRejected: On 4xx responses (413 for oversize blobs)
            StoreUnavailable: On 5xx responses, transport errors or an unparseable reply
        """
        url = f"{self.publisher_url}/v1/blobs"
        headers = {"Content-Type": content_type} if content_type else {}

        response = self._send(
            "PUT", url,
            params={"epochs": self.config.epochs},
            data=content,
            headers=headers
        )

        if 400 <= response.status_code < 500:
            raise StoreRejected(
                f"Upload rejected with HTTP {response.status_code}: {response.text}",
                status_code=response.status_code
            )
        if response.status_code >= 300:
            raise StoreUnavailable(f"Upload failed with HTTP {response.status_code}: {response.text}")

        try:
            data = response.json()
        except ValueError as e:
            raise StoreUnavailable(f"Invalid JSON returned from publisher: {response.text}") from e

        blob_id, status, object_id, size = parse_store_response(data)
        self.logger.info(f"Uploaded {len(content)} bytes as blob {blob_id} ({status.value})")

        return BlobRef(
            blob_id=blob_id,
            url=self.public_url(blob_id),
            status=status,
            object_id=object_id,
            size=size if size is not None else len(content)
        )

    def fetch_url(self, url: str) -> bytes:
        """
        Read content from a URL.

        Raises:
            NotFound: On HTTP 404
            StoreUnavailable: On any other failure
        """
        response = self._send("GET", url)

        if response.status_code == 404:
            raise NotFound(url)
        if response.status_code != 200:
            raise StoreUnavailable(f"GET {url} failed with HTTP {response.status_code}")

        return response.content

    def get(self, ref: Union[BlobRef, str]) -> bytes:
        """Read a blob from the aggregator."""
        blob_id = self.blob_id_of(ref)
        try:
            return self.fetch_url(self.public_url(blob_id))
        except NotFound:
            raise NotFound(blob_id) from None

    def exists(self, ref: Union[BlobRef, str]) -> bool:
        """
        Ask the aggregator for a blob.

        Returns:
            True on 200, False on 404

        Raises:
            StoreUnavailable: On any other status or transport failure
        """
        url = self.public_url(self.blob_id_of(ref))
        response = self._send("HEAD", url)

        if response.status_code == 200:
            return True
        if response.status_code == 404:
            return False
        raise StoreUnavailable(f"HEAD {url} failed with HTTP {response.status_code}")

    def close(self):
        """Close the HTTP session."""
        self.session.close()

