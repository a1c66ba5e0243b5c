"""
DropForge - Transaction Assembly

Unsigned transaction assembly for collection creation, minting and token
launches, and the local view of in-flight mints.
"""

from .builder import (
    ProgrammableTransaction,
    MintRequest,
    CollectionParams,
    TokenLaunchParams,
    assemble_mint,
    assemble_create_collection,
    assemble_launch_token
)
from .state import CollectionView, MintStatus, execute_mint

__all__ = [
    "ProgrammableTransaction",
    "MintRequest",
    "CollectionParams",
    "TokenLaunchParams",
    "assemble_mint",
    "assemble_create_collection",
    "assemble_launch_token",
    "CollectionView",
    "MintStatus",
    "execute_mint",
]
