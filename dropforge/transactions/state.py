"""
DropForge - Local Mint State

Client-side view of a collection while mints are in flight. A view starts
from a confirmed CollectionState read from the ledger; submitted mints are
tracked as pending until finality, then patched in optimistically. Any
patched view is stale until it is refreshed from the ledger.
"""

import logging
from dataclasses import replace
from enum import Enum
from typing import Callable, Dict, List, Optional

from ..exceptions import TransactionAssemblyError, TransactionFailed
from ..network.config import NetworkConfig
from ..network.rpc import RPCError, SuiRPCClient, effects_status
from ..registry.collections import CollectionReconstructor, CollectionState, TokenItem
from .builder import MintRequest, ProgrammableTransaction

# Signs and submits a transaction, returning its digest
Submitter = Callable[[ProgrammableTransaction], str]

logger = logging.getLogger(__name__)


class MintStatus(str, Enum):
    """Local status of one token."""
    AVAILABLE = "available"
    PENDING = "pending"
    MINTED = "minted"


class CollectionView:
    """Mutable local view over a confirmed collection state."""

    def __init__(self, state: CollectionState):
        self.logger = logging.getLogger(__name__)
        self._reset(state)

    def _reset(self, state: CollectionState):
        self.state = state
        self.items: List[TokenItem] = list(state.items)
        self.minted_count = state.record.minted_count
        self.stale = False
        self._pending: Dict[int, Optional[str]] = {}

    @property
    def collection_id(self) -> str:
        return self.state.collection_id

    @property
    def mint_price(self) -> int:
        return self.state.record.mint_price

    def _item(self, ordinal: int) -> TokenItem:
        if not 0 <= ordinal < len(self.items):
            raise TransactionAssemblyError(
                f"Ordinal {ordinal} out of range for {self.collection_id} ({len(self.items)} tokens)"
            )
        return self.items[ordinal]

    def status(self, ordinal: int) -> MintStatus:
        """Local status of a token."""
        if self._item(ordinal).minted:
            return MintStatus.MINTED
        if ordinal in self._pending:
            return MintStatus.PENDING
        return MintStatus.AVAILABLE

    def pending(self) -> List[int]:
        """Ordinals with a submission awaiting finality."""
        return sorted(self._pending)

    def available(self) -> List[TokenItem]:
        return [item for item in self.items if self.status(item.ordinal) is MintStatus.AVAILABLE]

    def mint_request(self, ordinal: int, payer: str) -> MintRequest:
        """Request for one token at the collection's current price."""
        return MintRequest(
            collection_id=self.collection_id,
            item=self._item(ordinal),
            price=self.mint_price,
            payer=payer,
        )

    def begin_mint(self, ordinal: int, digest: Optional[str] = None):
        """
        Mark a token as submitted.

        Raises:
            TransactionAssemblyError: If the token is not available
        """
        status = self.status(ordinal)
        if status is not MintStatus.AVAILABLE:
            raise TransactionAssemblyError(f"Token {ordinal} of {self.collection_id} is {status.value}")
        self._pending[ordinal] = digest

    def track(self, ordinal: int, digest: str):
        """Record the digest of a pending mint."""
        if ordinal in self._pending:
            self._pending[ordinal] = digest

    def digest(self, ordinal: int) -> Optional[str]:
        return self._pending.get(ordinal)

    def confirm_mint(self, ordinal: int):
        """Patch a finalized mint into the view; the view becomes stale."""
        item = self._item(ordinal)
        self._pending.pop(ordinal, None)
        if item.minted:
            return
        self.items[ordinal] = replace(item, minted=True)
        self.minted_count += 1
        self.stale = True

    def fail_mint(self, ordinal: int):
        """Drop a pending mint; the confirmed state is unchanged."""
        self._pending.pop(ordinal, None)

    def refresh(self, reconstructor: CollectionReconstructor) -> CollectionState:
        """Re-read the collection from the ledger, discarding optimistic patches."""
        state = reconstructor.load_collection(self.collection_id)
        if self._pending:
            self.logger.warning(
                f"Refreshing {self.collection_id} with {len(self._pending)} pending mints"
            )
        self._reset(state)
        return state


def execute_mint(view: CollectionView, request: MintRequest, config: NetworkConfig,
                 submit: Submitter, ledger: Optional[SuiRPCClient] = None,
                 timeout: float = 60.0) -> str:
    """
    Assemble, submit and track one mint.

    Args:
        view: Local collection view to update
        request: Mint request (consumed by this call)
        config: Network configuration
        submit: Wallet callback signing and submitting the transaction
        ledger: When given, wait for finality and check the effects status
            before patching the view
        timeout: Seconds to wait for finality

    Returns:
        Transaction digest

    Raises:
        TransactionAssemblyError: If the token is not available or the request was used
        TransactionFailed: If submission fails or the transaction does not succeed
    """
    ordinal = request.item.ordinal
    view.begin_mint(ordinal)

    try:
        tx = request.assemble(config)
    except (TransactionAssemblyError, ValueError):
        view.fail_mint(ordinal)
        raise

    try:
        digest = submit(tx)
    except Exception as e:
        view.fail_mint(ordinal)
        raise TransactionFailed(f"Mint submission failed: {e}") from e

    view.track(ordinal, digest)
    logger.info(f"Submitted mint of token {ordinal} in {view.collection_id}: {digest}")

    if ledger is not None:
        try:
            block = ledger.wait_for_transaction(digest, timeout=timeout)
        except RPCError as e:
            view.fail_mint(ordinal)
            raise TransactionFailed(f"Mint {digest} not confirmed: {e}", digest) from e

        status = effects_status(block)
        if status != "success":
            view.fail_mint(ordinal)
            raise TransactionFailed(f"Mint {digest} finished with status {status}", digest)

    view.confirm_mint(ordinal)
    return digest
