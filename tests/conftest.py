"""
Pytest configuration and fixtures for DropForge tests.
"""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from dropforge.network.config import NetworkConfig
from dropforge.network.rpc import RPCError
from dropforge.nft.publisher import AssetPublisher
from dropforge.nft.storage import Asset, LocalBlobStore


REGISTRY_ID = "0x" + "22" * 32
TABLE_ID = "0x" + "ab" * 32
ACCOUNT = "0x" + "11" * 32
COLLECTION_ID = "0x" + "c1" * 32

PNG_HEADER = b'\x89PNG\r\n\x1a\n'


def move_object(object_id: str, fields: Dict[str, Any],
                object_type: str = "0xpkg::dropforge::Collection") -> Dict[str, Any]:
    """sui_getObject response for a Move object."""
    return {
        "data": {
            "objectId": object_id,
            "version": "1",
            "type": object_type,
            "content": {
                "dataType": "moveObject",
                "type": object_type,
                "hasPublicTransfer": False,
                "fields": fields,
            },
        }
    }


def collection_fields(name: str = "Forge", description: str = "Hammered art",
                      max_supply: int = 3, minted_count: int = 1,
                      mint_price: int = 1_500_000_000, base_uri: str = "",
                      **extra) -> Dict[str, Any]:
    """Move fields of a dropforge::Collection as the node renders them."""
    fields = {
        "id": {"id": COLLECTION_ID},
        "name": name,
        "description": description,
        "max_supply": str(max_supply),
        "minted_count": str(minted_count),
        "mint_price": str(mint_price),
        "base_uri": base_uri,
    }
    fields.update(extra)
    return fields


def registry_object(table_id: str = TABLE_ID) -> Dict[str, Any]:
    return move_object(REGISTRY_ID, {
        "id": {"id": REGISTRY_ID},
        "user_collections": {
            "type": "0x2::table::Table<address, vector<0x2::object::ID>>",
            "fields": {"id": {"id": table_id}, "size": "1"},
        },
    }, object_type="0xpkg::dropforge::Registry")


def table_entry(account: str, value: Any, entry_id: str = "0x" + "e1" * 32) -> Dict[str, Any]:
    """Dynamic field object holding one account's collection ids."""
    return move_object(entry_id, {
        "id": {"id": entry_id},
        "name": account,
        "value": value,
    }, object_type="0x2::dynamic_field::Field<address, vector<0x2::object::ID>>")


class FakeLedger:
    """In-memory stand-in for SuiRPCClient serving canned node responses."""

    def __init__(self):
        self.objects: Dict[str, Dict[str, Any]] = {}
        self.dynamic_fields: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.field_pages: Dict[str, List[Dict[str, Any]]] = {}
        self.transactions: Dict[str, Dict[str, Any]] = {}
        self.failures: Dict[str, Exception] = {}
        self.calls: List[Tuple[str, Any]] = []

    def _check(self, key: str):
        if key in self.failures:
            raise self.failures[key]

    def get_object(self, object_id: str, show_content: bool = True) -> Dict[str, Any]:
        self.calls.append(("get_object", object_id))
        self._check(object_id)
        return self.objects.get(object_id, {"error": {"code": "notExists", "object_id": object_id}})

    def get_dynamic_field_object(self, parent_id: str, name_type: str, name_value: Any) -> Dict[str, Any]:
        self.calls.append(("get_dynamic_field_object", name_value))
        self._check(parent_id)
        return self.dynamic_fields.get(
            (parent_id, name_value),
            {"error": {"code": "dynamicFieldNotFound", "parent_object_id": parent_id}}
        )

    def get_dynamic_fields(self, parent_id: str, cursor: Optional[str] = None,
                           limit: Optional[int] = None) -> Dict[str, Any]:
        self.calls.append(("get_dynamic_fields", cursor))
        pages = self.field_pages.get(parent_id, [])
        index = int(cursor) if cursor else 0
        if index >= len(pages):
            return {"data": [], "nextCursor": None, "hasNextPage": False}
        has_next = index + 1 < len(pages)
        return {
            "data": pages[index],
            "nextCursor": str(index + 1) if has_next else None,
            "hasNextPage": has_next,
        }

    def wait_for_transaction(self, digest: str, timeout: float = 60.0,
                             poll_interval: float = 1.0) -> Dict[str, Any]:
        self.calls.append(("wait_for_transaction", digest))
        self._check(digest)
        if digest not in self.transactions:
            raise RPCError(-32602, f"Could not find the referenced transaction {digest}")
        return self.transactions[digest]

    def close(self):
        pass

    def add_collection(self, collection_id: str, **field_values) -> Dict[str, Any]:
        fields = collection_fields(**field_values)
        fields["id"] = {"id": collection_id}
        self.objects[collection_id] = move_object(collection_id, fields)
        return fields

    def add_registry(self, entries: Optional[Dict[str, Any]] = None):
        """Registry plus one table entry per account."""
        self.objects[REGISTRY_ID] = registry_object()
        for account, value in (entries or {}).items():
            self.dynamic_fields[(TABLE_ID, account)] = table_entry(account, value)


@pytest.fixture
def config():
    """Testnet configuration with an app URL for mint links."""
    return NetworkConfig.for_network("testnet", app_url="https://dropforge.example")


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def store(tmp_path):
    """Local blob store rooted in a temporary directory."""
    return LocalBlobStore(tmp_path / "blobs")


@pytest.fixture
def sample_assets():
    """Three distinct small PNG-looking assets."""
    return [
        Asset(content=PNG_HEADER + bytes([i]) * 16, content_type="image/png", filename=f"{i}.png")
        for i in range(3)
    ]


@pytest.fixture
def published(store, sample_assets):
    """Sample assets published to the local store."""
    return AssetPublisher(store).publish_detailed(sample_assets)


@pytest.fixture
def minted_collection(ledger, published):
    """Three-token collection with one token minted, backed by the published manifest."""
    ledger.add_collection(COLLECTION_ID, base_uri=published.manifest_url, minted_count=1, max_supply=3)
    return COLLECTION_ID


# Test markers for different test categories
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "cli: mark test as a command line test"
    )
    config.addinivalue_line(
        "markers", "concurrency: mark test as a concurrency test"
    )


# Pytest collection hooks
def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on test names."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        if "cli" in item.name:
            item.add_marker(pytest.mark.cli)

        if "concurrent" in item.name or "thread" in item.name:
            item.add_marker(pytest.mark.concurrency)
