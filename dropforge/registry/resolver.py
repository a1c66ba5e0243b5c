"""
DropForge - Registry Resolver

Recovers which collections an account owns by walking the on-chain index:
the global Registry object holds a `user_collections` table
(Table<address, vector<ID>>), and each account with at least one
collection has a dynamic field entry in that table.
"""

import logging
from typing import Any, List, Optional

from ..exceptions import RegistryMalformed, RegistryUnavailable
from ..network.rpc import RPCError, SuiRPCClient, object_content, object_error
from .decoder import ABSENT, decode_id, decode_list, decode_text, field, field_path, normalize_address

USER_COLLECTIONS_FIELD = "user_collections"
DYNAMIC_FIELD_NOT_FOUND = "dynamicFieldNotFound"
ADDRESS_KEY_TYPE = "address"


class RegistryResolver:
    """Resolves account -> owned collection ids through the registry."""

    def __init__(self, ledger: SuiRPCClient, page_size: int = 50):
        self.ledger = ledger
        self.page_size = page_size
        self.logger = logging.getLogger(__name__)

    def table_id(self, registry_id: str) -> str:
        """
        Read the registry and return the id of its owned-collections table.

        Raises:
            RegistryUnavailable: If the registry object cannot be read
            RegistryMalformed: If the table id is absent
        """
        try:
            response = self.ledger.get_object(registry_id)
        except RPCError as e:
            raise RegistryUnavailable(f"Registry {registry_id} unreadable: {e}") from e

        error = object_error(response)
        if error:
            raise RegistryUnavailable(f"Registry {registry_id} unreadable: {error.get('code', error)}")

        content = object_content(response)
        if content is None:
            raise RegistryUnavailable(f"Registry {registry_id} has no Move object content")

        table_id = decode_id(field_path(content, USER_COLLECTIONS_FIELD, "id"))
        if table_id is None:
            raise RegistryMalformed(registry_id, f"{USER_COLLECTIONS_FIELD}.id")
        return table_id

    def resolve_owned_collections(self, registry_id: str, account: str) -> List[str]:
        """
        Return the ids of the collections created by an account, in creation order.

        An account without a table entry, and an account whose entry holds an
        empty list, both yield an empty list.

        Raises:
            RegistryUnavailable: If the registry object cannot be read
            RegistryMalformed: If the registry or the account entry is malformed
            RPCError: Transport failures of the entry lookup propagate unchanged
        """
        address = normalize_address(account)
        table_id = self.table_id(registry_id)

        response = self.ledger.get_dynamic_field_object(table_id, ADDRESS_KEY_TYPE, address)

        error = object_error(response)
        if error:
            if error.get("code") == DYNAMIC_FIELD_NOT_FOUND:
                self.logger.debug(f"No registry entry for {address}")
                return []
            raise RegistryUnavailable(f"Entry lookup for {address} failed: {error.get('code', error)}")

        content = object_content(response)
        if content is None:
            raise RegistryMalformed(registry_id, f"{USER_COLLECTIONS_FIELD}[{address}]")

        collection_ids = self._decode_entry_value(field(content, "value"))
        if collection_ids is None:
            raise RegistryMalformed(registry_id, f"{USER_COLLECTIONS_FIELD}[{address}].value")

        if not collection_ids:
            self.logger.debug(f"Registry entry for {address} is empty")
        return collection_ids

    @staticmethod
    def _decode_entry_value(value: Any) -> Optional[List[str]]:
        """The entry value is a vector<ID>, sometimes wrapped one level deeper."""
        if value is ABSENT:
            return None
        return decode_list(value, decode_id)

    def iter_entries(self, registry_id: str):
        """Yield every dynamic field entry of the owned-collections table."""
        table_id = self.table_id(registry_id)
        cursor = None

        while True:
            page = self.ledger.get_dynamic_fields(table_id, cursor, self.page_size) or {}
            for entry in page.get("data") or []:
                yield entry

            cursor = page.get("nextCursor")
            if not page.get("hasNextPage") or cursor is None:
                break

    def list_publishers(self, registry_id: str) -> List[str]:
        """Addresses of every account with an entry in the registry."""
        publishers = []
        for entry in self.iter_entries(registry_id):
            address = decode_text(field(entry.get("name"), "value"))
            if address:
                publishers.append(address)
        return publishers

    def scan_owned_collections(self, registry_id: str, account: str) -> List[str]:
        """
        Resolve owned collections by scanning the table instead of a keyed lookup.

        Matches the account address case-insensitively against every entry
        key, for nodes that do not serve keyed dynamic field reads.
        """
        address = normalize_address(account)

        for entry in self.iter_entries(registry_id):
            key = decode_text(field(entry.get("name"), "value"))
            if not key or normalize_address(key) != address:
                continue

            entry_id = entry.get("objectId")
            response = self.ledger.get_object(entry_id)
            content = object_content(response)
            if content is None:
                raise RegistryMalformed(registry_id, f"{USER_COLLECTIONS_FIELD}[{address}]")

            collection_ids = self._decode_entry_value(field(content, "value"))
            if collection_ids is None:
                raise RegistryMalformed(registry_id, f"{USER_COLLECTIONS_FIELD}[{address}].value")
            return collection_ids

        self.logger.debug(f"No registry entry for {address} found by scan")
        return []

