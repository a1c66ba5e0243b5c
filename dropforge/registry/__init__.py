"""
DropForge - Ledger Read Side

Ledger value decoding, registry resolution and collection reconstruction.
"""

from .resolver import RegistryResolver
from .collections import (
    CollectionRecord,
    CollectionState,
    CollectionSummary,
    CollectionLoadResult,
    CollectionReconstructor,
    TokenItem,
    format_price
)

__all__ = [
    "RegistryResolver",
    "CollectionRecord",
    "CollectionState",
    "CollectionSummary",
    "CollectionLoadResult",
    "CollectionReconstructor",
    "TokenItem",
    "format_price",
]
