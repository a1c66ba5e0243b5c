"""
DropForge - Network Layer

Network configuration and the Sui JSON-RPC client.
"""

from .config import NetworkConfig, NETWORKS, DEFAULT_NETWORK
from .rpc import (
    SuiRPCClient,
    ConnectionPool,
    RPCError,
    RPCConnectionError,
    RPCTimeoutError,
    RPCResponse
)

__all__ = [
    "NetworkConfig",
    "NETWORKS",
    "DEFAULT_NETWORK",
    "SuiRPCClient",
    "ConnectionPool",
    "RPCError",
    "RPCConnectionError",
    "RPCTimeoutError",
    "RPCResponse",
]
