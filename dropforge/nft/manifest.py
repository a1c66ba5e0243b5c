"""
DropForge - Collection Manifest

A manifest is a JSON array of image URLs, one per token. The position of a
URL in the array is the token's mint ordinal, so entries are never
reordered once published.
"""

import json
from dataclasses import dataclass, field
from typing import List, Tuple, Union

from ..exceptions import ManifestEmpty
from .storage import BlobStore

URL_SCHEMES = ("http://", "https://", "file://")


@dataclass
class Manifest:
    """Ordered list of per-token asset URLs."""

    urls: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.urls)

    def __iter__(self):
        return iter(self.urls)

    def __getitem__(self, ordinal: int) -> str:
        return self.urls[ordinal]

    def to_json(self) -> str:
        """Serialize as a pretty-printed JSON array."""
        return json.dumps(self.urls, indent=2)

    def to_bytes(self) -> bytes:
        return self.to_json().encode('utf-8')

    @classmethod
    def from_json(cls, raw: Union[str, bytes]) -> 'Manifest':
        """
        Parse a manifest.

        Raises:
            ManifestEmpty: If the payload is not a non-empty JSON array of strings
        """
        try:
            data = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as e:
            raise ManifestEmpty(f"Manifest is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise ManifestEmpty(f"Manifest is not a JSON array (got {type(data).__name__})")
        if not data:
            raise ManifestEmpty("Manifest is empty")

        for ordinal, entry in enumerate(data):
            if not isinstance(entry, str) or not entry:
                raise ManifestEmpty(f"Manifest entry {ordinal} is not a URL string: {entry!r}")

        return cls(urls=data)

    def matches(self, other: 'Manifest') -> bool:
        """Structural equality: same length, same URLs in the same order."""
        return len(self) == len(other) and self.urls == other.urls


def is_url(value: str) -> bool:
    return value.startswith(URL_SCHEMES)


def canonicalize_ref(ref: str, store: BlobStore) -> str:
    """Turn a stored manifest reference (URL or bare blob id) into a URL."""
    ref = ref.strip()
    if is_url(ref):
        return ref
    return store.public_url(ref)


def fetch_manifest(store: BlobStore, ref: str) -> Tuple[str, Manifest]:
    """
    Resolve and download a manifest.

    Returns:
        (canonical manifest URL, parsed manifest)
    """
    url = canonicalize_ref(ref, store)
    return url, Manifest.from_json(store.fetch_url(url))
