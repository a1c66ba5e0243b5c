"""
DropForge - Collection State Reconstruction

Rebuilds a collection's full state from the ledger object and its remote
manifest: the decoded on-chain record plus one TokenItem per manifest entry.

Mint status is inferred from the mint counter alone: ordinal i is reported
minted when i < minted_count. The ledger does not record which ordinal each
mint used, so out-of-order mints are misreported by this approximation.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from ..exceptions import (
    CollectionMalformed,
    ConsistencyWarning,
    DropForgeError,
    NotFound,
    UnrecognizedValueShape,
)
from ..network.config import NetworkConfig
from ..network.rpc import RPCError, SuiRPCClient, object_content, object_error
from ..nft.manifest import Manifest, fetch_manifest
from ..nft.storage import BlobStore
from .decoder import (
    ABSENT,
    classify,
    decode_int,
    decode_text,
    field as ledger_field,
    require,
)

MIST_PER_SUI = 10 ** 9


@dataclass(frozen=True)
class CollectionRecord:
    """On-chain collection state."""

    collection_id: str
    name: str
    description: str
    max_supply: int
    minted_count: int
    mint_price: int
    manifest_ref: str
    royalty_bps: Optional[int] = None
    creator: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        result = {
            "collection_id": self.collection_id,
            "name": self.name,
            "description": self.description,
            "max_supply": self.max_supply,
            "minted_count": self.minted_count,
            "mint_price": self.mint_price,
            "manifest_ref": self.manifest_ref,
        }
        if self.royalty_bps is not None:
            result["royalty_bps"] = self.royalty_bps
        if self.creator:
            result["creator"] = self.creator
        return result


@dataclass(frozen=True)
class TokenItem:
    """One token of a collection, derived from the record and the manifest."""

    ordinal: int
    name: str
    description: str
    image_url: str
    minted: bool

    @property
    def number(self) -> int:
        """1-based display number."""
        return self.ordinal + 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ordinal": self.ordinal,
            "name": self.name,
            "description": self.description,
            "image_url": self.image_url,
            "minted": self.minted,
        }


@dataclass
class CollectionState:
    """A reconstructed collection."""

    record: CollectionRecord
    items: List[TokenItem]
    manifest_url: str
    warnings: List[ConsistencyWarning] = field(default_factory=list)

    @property
    def collection_id(self) -> str:
        return self.record.collection_id

    @property
    def is_consistent(self) -> bool:
        return not self.warnings

    def next_available(self) -> Optional[TokenItem]:
        """First token not reported as minted."""
        for item in self.items:
            if not item.minted:
                return item
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record": self.record.to_dict(),
            "manifest_url": self.manifest_url,
            "items": [item.to_dict() for item in self.items],
            "warnings": [w.message for w in self.warnings],
        }


@dataclass
class CollectionLoadResult:
    """Per-collection outcome of a batch load; exactly one of state/error is set."""

    collection_id: str
    state: Optional[CollectionState] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.state is not None


@dataclass
class CollectionSummary:
    """Listing view of a collection."""

    collection_id: str
    name: str
    description: str
    minted_count: int
    max_supply: int
    mint_price: str
    preview_image: Optional[str] = None
    mint_url: Optional[str] = None

    @property
    def progress(self) -> float:
        if self.max_supply <= 0:
            return 0.0
        return min(self.minted_count / self.max_supply, 1.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collection_id": self.collection_id,
            "name": self.name,
            "description": self.description,
            "minted": f"{self.minted_count} / {self.max_supply}",
            "mint_price": self.mint_price,
            "preview_image": self.preview_image,
            "mint_url": self.mint_url,
        }


def format_price(mist: int, places: int = 2) -> str:
    """Render an amount of MIST in SUI, e.g. 1500000000 -> '1.50 SUI'."""
    sui = Decimal(mist) / Decimal(MIST_PER_SUI)
    return f"{sui:.{places}f} SUI"


def token_name(collection_name: str, ordinal: int) -> str:
    return f"{collection_name} #{ordinal + 1}"


def token_description(collection_description: str, ordinal: int) -> str:
    return f"{collection_description} - NFT #{ordinal + 1}"


def build_items(record: CollectionRecord, manifest: Manifest) -> List[TokenItem]:
    """Zip manifest entries with their ordinals into token items."""
    return [
        TokenItem(
            ordinal=ordinal,
            name=token_name(record.name, ordinal),
            description=token_description(record.description, ordinal),
            image_url=url,
            minted=ordinal < record.minted_count,
        )
        for ordinal, url in enumerate(manifest)
    ]


def check_consistency(record: CollectionRecord, manifest_length: int) -> List[ConsistencyWarning]:
    """Invariants checked on read but not enforced."""
    warnings = []
    if record.minted_count > record.max_supply:
        warnings.append(ConsistencyWarning(
            record.collection_id,
            f"minted_count {record.minted_count} exceeds max_supply {record.max_supply}"
        ))
    if record.minted_count > manifest_length:
        warnings.append(ConsistencyWarning(
            record.collection_id,
            f"minted_count {record.minted_count} exceeds manifest length {manifest_length}"
        ))
    return warnings


def decode_record(collection_id: str, content: Dict[str, Any]) -> CollectionRecord:
    """
    Decode a collection's Move content.

    Raises:
        CollectionMalformed: If a required field is absent or has the wrong shape
    """
    def required(name, decoder):
        value = ledger_field(content, name)
        if value is not ABSENT:
            try:
                classify(value)
            except UnrecognizedValueShape as e:
                raise CollectionMalformed(
                    collection_id, name,
                    f"Collection {collection_id} field '{name}' has an unrecognized shape: {e}"
                ) from e
        return require(value, decoder, lambda: CollectionMalformed(collection_id, name))

    max_supply = required("max_supply", decode_int)
    if max_supply <= 0:
        raise CollectionMalformed(collection_id, "max_supply", f"Collection {collection_id} has max_supply {max_supply}")

    royalty = ledger_field(content, "royalty_bps")
    creator = ledger_field(content, "creator")

    return CollectionRecord(
        collection_id=collection_id,
        name=required("name", decode_text),
        description=required("description", decode_text),
        max_supply=max_supply,
        minted_count=required("minted_count", decode_int),
        mint_price=required("mint_price", decode_int),
        manifest_ref=required("base_uri", decode_text),
        royalty_bps=decode_int(royalty) if royalty is not ABSENT else None,
        creator=decode_text(creator) if creator is not ABSENT else None,
    )


class CollectionReconstructor:
    """Loads collection state from the ledger and the blob store."""

    def __init__(self, ledger: SuiRPCClient, store: BlobStore,
                 config: Optional[NetworkConfig] = None):
        self.ledger = ledger
        self.store = store
        self.config = config
        self.logger = logging.getLogger(__name__)

    def load_record(self, collection_id: str) -> CollectionRecord:
        """
        Fetch and decode the on-chain record only.

        Raises:
            NotFound: If the object does not exist or is not a Move object
            CollectionMalformed: If a required field is absent
        """
        response = self.ledger.get_object(collection_id)

        error = object_error(response)
        if error:
            raise NotFound(collection_id, f"Collection {collection_id} not found: {error.get('code', error)}")

        content = object_content(response)
        if content is None:
            raise NotFound(collection_id, f"Collection {collection_id} has no Move object content")

        return decode_record(collection_id, content)

    def load_collection(self, collection_id: str) -> CollectionState:
        """
        Reconstruct a collection's record and token list.

        Raises:
            NotFound: If the collection object (or its manifest) is missing
            CollectionMalformed: If a required field is absent
            ManifestEmpty: If the manifest is empty or not a JSON array
            RPCError, StoreUnavailable: Transport failures propagate unchanged
        """
        record = self.load_record(collection_id)
        manifest_url, manifest = fetch_manifest(self.store, record.manifest_ref)

        warnings = check_consistency(record, len(manifest))
        for warning in warnings:
            self.logger.warning(f"Consistency warning: {warning}")

        state = CollectionState(
            record=record,
            items=build_items(record, manifest),
            manifest_url=manifest_url,
            warnings=warnings,
        )
        self.logger.debug(
            f"Loaded collection {collection_id}: {record.minted_count}/{record.max_supply} minted, "
            f"{len(manifest)} manifest entries"
        )
        return state

    def _load_isolated(self, collection_id: str) -> CollectionLoadResult:
        try:
            return CollectionLoadResult(collection_id, state=self.load_collection(collection_id))
        except (DropForgeError, RPCError) as e:
            self.logger.error(f"Failed to load collection {collection_id}: {e}")
            return CollectionLoadResult(collection_id, error=e)

    def load_collections(self, collection_ids: Sequence[str],
                         max_workers: int = 4) -> List[CollectionLoadResult]:
        """
        Load several collections concurrently.

        Each collection is loaded independently: a failure is captured on its
        own result and does not affect the others. Results keep input order.
        """
        if not collection_ids:
            return []
        if max_workers <= 1 or len(collection_ids) == 1:
            return [self._load_isolated(cid) for cid in collection_ids]

        with ThreadPoolExecutor(max_workers=min(max_workers, len(collection_ids))) as executor:
            return list(executor.map(self._load_isolated, collection_ids))

    def summarize(self, state: CollectionState) -> CollectionSummary:
        """Listing view with preview image, formatted price and mint page URL."""
        record = state.record
        return CollectionSummary(
            collection_id=record.collection_id,
            name=record.name,
            description=record.description,
            minted_count=record.minted_count,
            max_supply=record.max_supply,
            mint_price=format_price(record.mint_price),
            preview_image=state.items[0].image_url if state.items else None,
            mint_url=self.config.mint_page_url(record.collection_id) if self.config else None,
        )
