"""
DropForge - Sui JSON-RPC Client

This module provides the read-side ledger client: a JSON-RPC 2.0 client for
a Sui full node with session pooling, request statistics and typed errors.
Only the query surface used by the registry and collection readers is
exposed, plus transaction lookup for finality checks.
"""

import json
import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import NetworkConfig


class RPCError(Exception):
    """Base exception for RPC-related errors."""

    def __init__(self, code: int, message: str, data: Optional[Any] = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"RPC Error {code}: {message}")


class RPCConnectionError(RPCError):
    """Exception for RPC connection failures."""
    pass


class RPCTimeoutError(RPCError):
    """Exception for RPC timeout errors."""
    pass


@dataclass
class RPCResponse:
    """Represents an RPC response with metadata."""
    result: Any
    error: Optional[Dict[str, Any]] = None
    id: Optional[Union[str, int]] = None
    request_time: float = 0.0
    response_time: float = 0.0

    def get_error_code(self) -> Optional[int]:
        """Get error code if present."""
        return self.error.get("code") if self.error else None

    def get_error_message(self) -> Optional[str]:
        """Get error message if present."""
        return self.error.get("message") if self.error else None


def object_error(response: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Return the error payload of an object read, if any.

    Sui reports missing objects and missing dynamic fields inside a
    successful JSON-RPC result ({"error": {"code": "notExists", ...}})
    rather than as a JSON-RPC error.
    """
    if not isinstance(response, dict):
        return None
    error = response.get("error")
    return error if isinstance(error, dict) else None


def object_content(response: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Return the Move object content of an object read, or None."""
    if not isinstance(response, dict):
        return None
    data = response.get("data")
    if not isinstance(data, dict):
        return None
    content = data.get("content")
    if not isinstance(content, dict) or content.get("dataType") != "moveObject":
        return None
    return content


def effects_status(transaction: Optional[Dict[str, Any]]) -> Optional[str]:
    """Execution status ("success" / "failure") of a transaction block."""
    if not isinstance(transaction, dict):
        return None
    status = (transaction.get("effects") or {}).get("status") or {}
    return status.get("status")


class ConnectionPool:
    """Connection pool for RPC requests."""

    def __init__(self, config: NetworkConfig, max_retries: int = 0, pool_size: int = 10):
        """
        Initialize connection pool.

        Args:
            config: Network configuration carrying the RPC URL and timeout
            max_retries: Transport-level retries (0 disables retrying)
            pool_size: Maximum pooled connections per host
        """
        self.config = config
        self.logger = logging.getLogger(__name__)

        self.session = requests.Session()

        # Errors propagate to the caller unless retries are explicitly enabled
        retry_strategy: Union[Retry, int] = 0
        if max_retries > 0:
            retry_strategy = Retry(
                total=max_retries,
                backoff_factor=0.5,
                status_forcelist=[429, 502, 503, 504],
                allowed_methods=["POST"]
            )

        adapter = HTTPAdapter(max_retries=retry_strategy, pool_maxsize=pool_size)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self._request_counter = 0
        self._stats = {
            "total_requests": 0,
            "successful_requests": 0,
            "failed_requests": 0,
            "total_time": 0.0,
            "last_request_time": None
        }
        self._stats_lock = threading.Lock()

    def _next_id(self) -> int:
        with self._stats_lock:
            self._request_counter += 1
            return self._request_counter

    def _record_failure(self):
        with self._stats_lock:
            self._stats["failed_requests"] += 1

    def request(self, method: str, params: List[Any]) -> RPCResponse:
        """Make an RPC request."""
        start_time = time.time()

        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": self._next_id()
        }

        headers = {
            "Content-Type": "application/json",
            "User-Agent": "dropforge-rpc-client/1.0"
        }

        try:
            response = self.session.post(
                self.config.rpc_url,
                data=json.dumps(payload),
                headers=headers,
                timeout=self.config.timeout
            )

            request_time = time.time() - start_time

            with self._stats_lock:
                self._stats["total_requests"] += 1
                self._stats["total_time"] += request_time
                self._stats["last_request_time"] = datetime.now(timezone.utc)

            if response.status_code != 200:
                self._record_failure()
                raise RPCConnectionError(
                    response.status_code,
                    f"HTTP {response.status_code}: {response.reason}"
                )

            try:
                response_data = response.json()
            except ValueError as e:
                self._record_failure()
                raise RPCError(-32700, f"Invalid JSON response: {e}")

            rpc_response = RPCResponse(
                result=response_data.get("result"),
                error=response_data.get("error"),
                id=response_data.get("id"),
                request_time=start_time,
                response_time=time.time()
            )

            if rpc_response.error:
                self._record_failure()
                raise RPCError(
                    rpc_response.get_error_code(),
                    rpc_response.get_error_message(),
                    rpc_response.error.get("data")
                )

            with self._stats_lock:
                self._stats["successful_requests"] += 1

            return rpc_response

        except requests.exceptions.Timeout:
            self._record_failure()
            raise RPCTimeoutError(-1, f"Request timed out after {self.config.timeout}s")

        except requests.exceptions.ConnectionError as e:
            self._record_failure()
            raise RPCConnectionError(-1, f"Connection error: {e}")

        except requests.exceptions.RequestException as e:
            self._record_failure()
            raise RPCError(-1, f"Request failed: {e}")

    def get_stats(self) -> Dict[str, Any]:
        """Get connection pool statistics."""
        with self._stats_lock:
            stats = self._stats.copy()

        total = stats["total_requests"]
        return {
            **stats,
            "average_request_time": stats["total_time"] / total if total else 0,
            "success_rate": stats["successful_requests"] / total if total else 0,
            "rpc_url": self.config.rpc_url,
        }

    def close(self):
        """Close the connection pool."""
        if self.session:
            self.session.close()


class SuiRPCClient:
    """
    Read-side Sui ledger client.

    Returns the node's generic object representation unchanged; decoding
    into application values is left to dropforge.registry.decoder.
    """

    def __init__(self, config: NetworkConfig, pool: Optional[ConnectionPool] = None):
        """
        Initialize Sui RPC client.

        Args:
            config: Network configuration
            pool: Pre-built connection pool (built from config if None)
        """
        self.config = config
        self.pool = pool or ConnectionPool(config)
        self.logger = logging.getLogger(__name__)

    def _call(self, method: str, *params) -> Any:
        """
        Make an RPC call and return the result.

        Raises:
            RPCError: If RPC call fails
        """
        try:
            return self.pool.request(method, list(params)).result
        except RPCError as e:
            self.logger.error(f"RPC call {method} failed: {e}")
            raise

    def get_object(self, object_id: str, show_content: bool = True) -> Dict[str, Any]:
        """
        Get an object by id.

        Args:
            object_id: Object id (0x-prefixed hex)
            show_content: Include the Move content fields

        Returns:
            Object response ({"data": {...}} or {"error": {...}})
        """
        options = {"showContent": show_content, "showType": True, "showOwner": True}
        return self._call("sui_getObject", object_id, options)

    def get_dynamic_field_object(self, parent_id: str, name_type: str,
                                 name_value: Any) -> Dict[str, Any]:
        """
        Get the dynamic field object stored under a parent with the given key.

        A missing key is reported as {"error": {"code": "dynamicFieldNotFound"}}.
        """
        return self._call(
            "suix_getDynamicFieldObject",
            parent_id,
            {"type": name_type, "value": name_value}
        )

    def get_dynamic_fields(self, parent_id: str, cursor: Optional[str] = None,
                           limit: Optional[int] = None) -> Dict[str, Any]:
        """
        List one page of dynamic fields of a parent object.

        Returns:
            Page with "data", "nextCursor" and "hasNextPage"
        """
        return self._call("suix_getDynamicFields", parent_id, cursor, limit)

    def get_transaction_block(self, digest: str) -> Dict[str, Any]:
        """Get a transaction block with its effects."""
        return self._call(
            "sui_getTransactionBlock",
            digest,
            {"showEffects": True, "showEvents": True, "showObjectChanges": True}
        )

    def wait_for_transaction(self, digest: str, timeout: float = 60.0,
                             poll_interval: float = 1.0) -> Dict[str, Any]:
        """
        Poll until a transaction is visible to this node.

        Args:
            digest: Transaction digest
            timeout: Seconds to wait before giving up
            poll_interval: Seconds between polls

        Returns:
            Transaction block response

        Raises:
            RPCTimeoutError: If the transaction is not visible within timeout
        """
        deadline = time.monotonic() + timeout
        while True:
            try:
                return self.get_transaction_block(digest)
            except RPCConnectionError:
                raise
            except RPCTimeoutError:
                raise
            except RPCError as e:
                # Not yet indexed by this node
                if time.monotonic() + poll_interval > deadline:
                    raise RPCTimeoutError(-1, f"Transaction {digest} not found after {timeout}s") from e
                self.logger.debug(f"Transaction {digest} not visible yet: {e}")
                time.sleep(poll_interval)

    def get_stats(self) -> Dict[str, Any]:
        """Get client statistics."""
        return self.pool.get_stats()

    def close(self):
        """Close the client."""
        self.pool.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
