"""
Tests for DropForge transaction assembly.
"""

import json

import pytest

from dropforge.exceptions import TransactionAssemblyError
from dropforge.network.config import NETWORKS, NetworkConfig
from dropforge.registry.collections import TokenItem
from dropforge.transactions.builder import (
    GAS_COIN,
    CollectionParams,
    MintRequest,
    ProgrammableTransaction,
    TokenLaunchParams,
    assemble_create_collection,
    assemble_launch_token,
    assemble_mint,
)

from conftest import ACCOUNT, COLLECTION_ID

PACKAGE_ID = NETWORKS["testnet"]["package_id"]
REGISTRY = NETWORKS["testnet"]["registry_id"]


@pytest.fixture
def item():
    return TokenItem(
        ordinal=1,
        name="Forge #2",
        description="Hammered art - NFT #2",
        image_url="https://agg/v1/blobs/B2",
        minted=False,
    )


def collection_params(**overrides):
    values = dict(
        name="Forge",
        description="Hammered art",
        max_supply=3,
        royalty_bps=500,
        manifest_url="https://agg/v1/blobs/M",
        mint_price=1_500_000_000,
    )
    values.update(overrides)
    return CollectionParams(**values)


class TestProgrammableTransaction:
    """Test argument bookkeeping."""

    def test_inputs_and_results(self):
        tx = ProgrammableTransaction()

        assert tx.object("0x1") == {"Input": 0}
        assert tx.pure(5, "u64") == {"Input": 1}
        assert tx.inputs[1]["value"] == "5"
        assert tx.split_coins(GAS_COIN, [{"Input": 1}]) == {"NestedResult": [0, 0]}
        assert tx.move_call("0xp::m::f", []) == {"Result": 1}

    def test_to_json(self):
        tx = ProgrammableTransaction(sender="0x1")
        tx.pure(True, "bool")

        data = json.loads(tx.to_json())

        assert data["kind"] == "ProgrammableTransaction"
        assert data["inputs"] == [{"type": "pure", "valueType": "bool", "value": True}]


class TestAssembleMint:
    """Test mint transaction assembly."""

    def test_split_then_call(self, config, item):
        """Test payment carve-out from gas and the mint_nft call."""
        tx = assemble_mint(config, COLLECTION_ID, item, ACCOUNT, 1_500_000_000)

        assert tx.sender == ACCOUNT
        assert tx.commands[0] == {"SplitCoins": [GAS_COIN, [{"Input": 0}]]}
        assert tx.inputs[0] == {"type": "pure", "valueType": "u64", "value": "1500000000"}

        call = tx.commands[1]["MoveCall"]
        assert call["package"] == PACKAGE_ID
        assert call["module"] == "dropforge"
        assert call["function"] == "mint_nft"
        assert call["arguments"] == [
            {"Input": 1},
            {"Input": 2},
            {"Input": 3},
            {"Input": 4},
            {"NestedResult": [0, 0]},
            {"Input": 5},
        ]
        assert tx.inputs[1] == {"type": "object", "objectId": COLLECTION_ID}
        assert [i["value"] for i in tx.inputs[2:5]] == [item.name, item.description, item.image_url]
        assert tx.inputs[5] == {"type": "pure", "valueType": "address", "value": ACCOUNT}

    def test_payer_normalized(self, config, item):
        tx = assemble_mint(config, COLLECTION_ID, item, "0xABC", 0)

        assert tx.sender == "0x" + "0" * 61 + "abc"

    @pytest.mark.parametrize("price", [-1, 2 ** 64, 1.5, True])
    def test_invalid_price(self, config, item, price):
        with pytest.raises(TransactionAssemblyError):
            assemble_mint(config, COLLECTION_ID, item, ACCOUNT, price)

    def test_invalid_payer(self, config, item):
        with pytest.raises(TransactionAssemblyError):
            assemble_mint(config, COLLECTION_ID, item, "not-an-address", 1)

    def test_missing_package(self, item):
        """Test that a deployment without a package id cannot assemble calls."""
        with pytest.raises(ValueError):
            assemble_mint(NetworkConfig.for_network("mainnet"), COLLECTION_ID, item, ACCOUNT, 1)


class TestMintRequest:
    """Test single consumption of mint requests."""

    def test_assemble_once(self, config, item):
        request = MintRequest(COLLECTION_ID, item, 1_500_000_000, ACCOUNT)

        tx = request.assemble(config)

        assert request.consumed
        assert tx.commands[1]["MoveCall"]["function"] == "mint_nft"

    def test_second_assembly_rejected(self, config, item):
        request = MintRequest(COLLECTION_ID, item, 1_500_000_000, ACCOUNT)
        request.assemble(config)

        with pytest.raises(TransactionAssemblyError):
            request.assemble(config)

    def test_failed_assembly_not_consumed(self, config, item):
        """Test that an invalid request stays unconsumed."""
        request = MintRequest(COLLECTION_ID, item, -5, ACCOUNT)

        with pytest.raises(TransactionAssemblyError):
            request.assemble(config)

        assert not request.consumed


class TestCreateCollection:
    """Test create_collection assembly and validation."""

    def test_arguments(self, config):
        """Test argument order and byte-vector encoding of text."""
        tx = assemble_create_collection(config, collection_params())

        call = tx.commands[0]["MoveCall"]
        assert call["function"] == "create_collection"
        assert call["arguments"] == [{"Input": i} for i in range(7)]
        assert tx.inputs[0] == {"type": "object", "objectId": REGISTRY}
        assert tx.inputs[1] == {"type": "pure", "valueType": "vector<u8>", "value": list(b"Forge")}
        assert tx.inputs[3]["value"] == "3"
        assert tx.inputs[4] == {"type": "pure", "valueType": "u16", "value": 500}
        assert bytes(tx.inputs[5]["value"]) == b"https://agg/v1/blobs/M"
        assert tx.inputs[6]["value"] == "1500000000"
        assert tx.sender is None

    def test_sender(self, config):
        tx = assemble_create_collection(config, collection_params(), sender=ACCOUNT)
        assert tx.sender == ACCOUNT

    def test_manifest_length_mismatch_warns(self, config, caplog):
        """Test that a supply differing from the manifest is logged, not rejected."""
        with caplog.at_level("WARNING"):
            assemble_create_collection(config, collection_params(max_supply=5), manifest_length=3)

        assert "differs from manifest length" in caplog.text

    @pytest.mark.parametrize("overrides", [
        {"max_supply": 0},
        {"max_supply": -1},
        {"royalty_bps": -1},
        {"royalty_bps": 10001},
        {"mint_price": -1},
        {"name": ""},
        {"name": "   "},
        {"manifest_url": ""},
    ])
    def test_invalid_params(self, overrides):
        with pytest.raises(TransactionAssemblyError):
            collection_params(**overrides)

    def test_boundary_params(self):
        """Test the inclusive limits."""
        params = collection_params(royalty_bps=10000, mint_price=0, max_supply=1)
        assert params.royalty_bps == 10000


def launch_params(**overrides):
    values = dict(
        name="Forge Token",
        symbol="FRG",
        icon_url="https://agg/v1/blobs/I",
        initial_supply=1000,
        decimals=9,
    )
    values.update(overrides)
    return TokenLaunchParams(**values)


class TestLaunchToken:
    """Test launch_token assembly and validation."""

    def test_arguments(self, config):
        """Test argument order and scaling of supplies into base units."""
        tx = assemble_launch_token(config, launch_params(max_supply=5000), sender=ACCOUNT)

        call = tx.commands[0]["MoveCall"]
        assert call["package"] == PACKAGE_ID
        assert call["function"] == "launch_token"
        assert call["arguments"] == [{"Input": i} for i in range(6)]
        assert [entry["valueType"] for entry in tx.inputs] == [
            "string", "string", "u8", "string", "u64", "u64"
        ]
        assert tx.inputs[1]["value"] == "FRG"
        assert tx.inputs[2]["value"] == 9
        assert tx.inputs[3]["value"] == "https://agg/v1/blobs/I"
        assert tx.inputs[4]["value"] == "1000000000000"
        assert tx.inputs[5]["value"] == "5000000000000"
        assert tx.sender == ACCOUNT

    def test_uncapped_by_default(self, config):
        tx = assemble_launch_token(config, launch_params(decimals=0))

        assert tx.inputs[4]["value"] == "1000"
        assert tx.inputs[5]["value"] == "0"

    @pytest.mark.parametrize("decimals", [0, 18])
    def test_decimal_limits(self, decimals):
        params = launch_params(decimals=decimals, initial_supply=1)
        assert params.base_initial_supply == 10 ** decimals

    @pytest.mark.parametrize("overrides", [
        {"decimals": -1},
        {"decimals": 19},
        {"decimals": True},
        {"initial_supply": 0},
        {"initial_supply": -5},
        {"max_supply": 10},
        {"name": ""},
        {"symbol": " "},
        {"icon_url": ""},
        {"initial_supply": 10 ** 11, "decimals": 9},
    ])
    def test_invalid_params(self, overrides):
        with pytest.raises(TransactionAssemblyError):
            launch_params(**overrides)

    def test_missing_package(self):
        with pytest.raises(ValueError):
            assemble_launch_token(NetworkConfig.for_network("mainnet"), launch_params())
