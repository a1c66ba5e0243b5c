"""
DropForge - Transaction Builder

Assembles unsigned programmable transactions for the dropforge entry points
create_collection, mint_nft and launch_token. Signing and execution belong
to the wallet; this module only produces the command list a wallet signs.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..exceptions import TransactionAssemblyError
from ..network.config import NetworkConfig
from ..registry.collections import TokenItem
from ..registry.decoder import encode_text, normalize_address

MAX_ROYALTY_BPS = 10000
MAX_TOKEN_DECIMALS = 18
U64_MAX = 2 ** 64 - 1

GAS_COIN = "GasCoin"

Argument = Union[str, Dict[str, Any]]

logger = logging.getLogger(__name__)


@dataclass
class ProgrammableTransaction:
    """Inputs plus an ordered command list, in the node's JSON layout."""

    sender: Optional[str] = None
    inputs: List[Dict[str, Any]] = field(default_factory=list)
    commands: List[Dict[str, Any]] = field(default_factory=list)

    def _add_input(self, entry: Dict[str, Any]) -> Argument:
        self.inputs.append(entry)
        return {"Input": len(self.inputs) - 1}

    def object(self, object_id: str) -> Argument:
        """Reference an on-chain object."""
        return self._add_input({"type": "object", "objectId": object_id})

    def pure(self, value: Any, value_type: str) -> Argument:
        """Add a pure (BCS-encodable) value; u64 amounts are carried as strings."""
        if value_type in ("u64", "u128", "u256"):
            value = str(value)
        return self._add_input({"type": "pure", "valueType": value_type, "value": value})

    def _add_command(self, command: Dict[str, Any]) -> Argument:
        self.commands.append(command)
        return {"Result": len(self.commands) - 1}

    def split_coins(self, coin: Argument, amounts: List[Argument]) -> Argument:
        """Carve new coins out of an existing one; returns the first new coin."""
        index = len(self.commands)
        self._add_command({"SplitCoins": [coin, amounts]})
        return {"NestedResult": [index, 0]}

    def move_call(self, target: str, arguments: List[Argument],
                  type_arguments: Optional[List[str]] = None) -> Argument:
        """Call a Move function."""
        package, module, function = target.split("::")
        return self._add_command({
            "MoveCall": {
                "package": package,
                "module": module,
                "function": function,
                "type_arguments": type_arguments or [],
                "arguments": arguments,
            }
        })

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "ProgrammableTransaction",
            "sender": self.sender,
            "inputs": self.inputs,
            "commands": self.commands,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def _check_u64(name: str, value: int):
    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= U64_MAX:
        raise TransactionAssemblyError(f"{name} must be an integer in 0..{U64_MAX}, got {value!r}")


def _address(name: str, value: str) -> str:
    try:
        return normalize_address(value)
    except (ValueError, AttributeError) as e:
        raise TransactionAssemblyError(f"Invalid {name}: {value!r}") from e


def assemble_mint(config: NetworkConfig, collection_id: str, item: TokenItem,
                  payer: str, price: int) -> ProgrammableTransaction:
    """
    Build a mint transaction for one token.

    The payment is split from the gas coin and equals the collection's
    current mint price; the payer also receives the token.

    Raises:
        TransactionAssemblyError: On an invalid price, payer or collection id
    """
    _check_u64("price", price)
    payer = _address("payer", payer)
    collection_id = _address("collection id", collection_id)

    tx = ProgrammableTransaction(sender=payer)
    payment = tx.split_coins(GAS_COIN, [tx.pure(price, "u64")])
    tx.move_call(
        config.move_target("mint_nft"),
        [
            tx.object(collection_id),
            tx.pure(item.name, "string"),
            tx.pure(item.description, "string"),
            tx.pure(item.image_url, "string"),
            payment,
            tx.pure(payer, "address"),
        ]
    )

    logger.debug(f"Assembled mint of ordinal {item.ordinal} in {collection_id} for {price} MIST")
    return tx


@dataclass
class MintRequest:
    """A token, its price and its payer; assembled into a transaction exactly once."""

    collection_id: str
    item: TokenItem
    price: int
    payer: str
    consumed: bool = False

    def assemble(self, config: NetworkConfig) -> ProgrammableTransaction:
        """
        Build the transaction for this request.

        Raises:
            TransactionAssemblyError: If the request was already assembled
        """
        if self.consumed:
            raise TransactionAssemblyError(
                f"Mint request for ordinal {self.item.ordinal} of {self.collection_id} was already used"
            )
        tx = assemble_mint(config, self.collection_id, self.item, self.payer, self.price)
        self.consumed = True
        return tx


@dataclass
class CollectionParams:
    """Arguments of create_collection."""

    name: str
    description: str
    max_supply: int
    royalty_bps: int
    manifest_url: str
    mint_price: int

    def __post_init__(self):
        """Validate parameters after initialization."""
        if not self.name or not self.name.strip():
            raise TransactionAssemblyError("Collection name is required")
        if not self.manifest_url:
            raise TransactionAssemblyError("Manifest URL is required")
        _check_u64("max_supply", self.max_supply)
        if self.max_supply == 0:
            raise TransactionAssemblyError("max_supply must be positive")
        if not isinstance(self.royalty_bps, int) or not 0 <= self.royalty_bps <= MAX_ROYALTY_BPS:
            raise TransactionAssemblyError(
                f"royalty_bps must be between 0 and {MAX_ROYALTY_BPS}, got {self.royalty_bps!r}"
            )
        _check_u64("mint_price", self.mint_price)


def assemble_create_collection(config: NetworkConfig, params: CollectionParams,
                               sender: Optional[str] = None,
                               manifest_length: Optional[int] = None) -> ProgrammableTransaction:
    """
    Build a create_collection transaction registering a published manifest.

    Text arguments are passed as UTF-8 byte vectors, which is how the
    entry point declares them.
    """
    if manifest_length is not None and manifest_length != params.max_supply:
        logger.warning(
            f"max_supply {params.max_supply} differs from manifest length {manifest_length}"
        )

    tx = ProgrammableTransaction(sender=_address("sender", sender) if sender else None)
    tx.move_call(
        config.move_target("create_collection"),
        [
            tx.object(config.require_registry()),
            tx.pure(encode_text(params.name, as_bytes=True), "vector<u8>"),
            tx.pure(encode_text(params.description, as_bytes=True), "vector<u8>"),
            tx.pure(params.max_supply, "u64"),
            tx.pure(params.royalty_bps, "u16"),
            tx.pure(encode_text(params.manifest_url, as_bytes=True), "vector<u8>"),
            tx.pure(params.mint_price, "u64"),
        ]
    )
    return tx


@dataclass
class TokenLaunchParams:
    """
    Arguments of launch_token.

    Supplies are given in whole tokens and scaled by 10^decimals into base
    units. A max_supply of 0 leaves the supply uncapped.
    """

    name: str
    symbol: str
    icon_url: str
    initial_supply: int
    decimals: int = 9
    max_supply: int = 0

    def __post_init__(self):
        """Validate parameters after initialization."""
        if not self.name or not self.name.strip():
            raise TransactionAssemblyError("Token name is required")
        if not self.symbol or not self.symbol.strip():
            raise TransactionAssemblyError("Token symbol is required")
        if not self.icon_url:
            raise TransactionAssemblyError("Token icon URL is required")
        if (not isinstance(self.decimals, int) or isinstance(self.decimals, bool)
                or not 0 <= self.decimals <= MAX_TOKEN_DECIMALS):
            raise TransactionAssemblyError(
                f"decimals must be between 0 and {MAX_TOKEN_DECIMALS}, got {self.decimals!r}"
            )
        _check_u64("initial_supply", self.initial_supply)
        if self.initial_supply == 0:
            raise TransactionAssemblyError("initial_supply must be positive")
        _check_u64("max_supply", self.max_supply)
        if self.max_supply and self.max_supply < self.initial_supply:
            raise TransactionAssemblyError(
                f"max_supply {self.max_supply} is below initial_supply {self.initial_supply}"
            )
        _check_u64("initial_supply in base units", self.base_initial_supply)
        _check_u64("max_supply in base units", self.base_max_supply)

    @property
    def base_initial_supply(self) -> int:
        return self.initial_supply * 10 ** self.decimals

    @property
    def base_max_supply(self) -> int:
        return self.max_supply * 10 ** self.decimals


def assemble_launch_token(config: NetworkConfig, params: TokenLaunchParams,
                          sender: Optional[str] = None) -> ProgrammableTransaction:
    """
    Build a launch_token transaction creating a fungible token.

    Args:
        config: Network configuration naming the dropforge package
        params: Validated token parameters
        sender: Optional address submitting the transaction

    Returns:
        Unsigned transaction with a single launch_token call
    """
    tx = ProgrammableTransaction(sender=_address("sender", sender) if sender else None)
    tx.move_call(
        config.move_target("launch_token"),
        [
            tx.pure(params.name, "string"),
            tx.pure(params.symbol, "string"),
            tx.pure(params.decimals, "u8"),
            tx.pure(params.icon_url, "string"),
            tx.pure(params.base_initial_supply, "u64"),
            tx.pure(params.base_max_supply, "u64"),
        ]
    )
    logger.debug(f"Assembled launch_token for {params.symbol}: {params.base_initial_supply} base units")
    return tx
