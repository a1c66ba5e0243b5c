"""
Tests for DropForge network configuration and the CLI configuration manager.
"""

import json

import pytest
import yaml

from dropforge.cli.config import ConfigurationError, ConfigurationManager
from dropforge.network.config import NETWORKS, NetworkConfig


class TestNetworkConfig:
    """Test the explicit network configuration record."""

    def test_testnet_preset(self):
        config = NetworkConfig.for_network("testnet")

        assert config.package_id == NETWORKS["testnet"]["package_id"]
        assert config.registry_id == NETWORKS["testnet"]["registry_id"]
        assert config.move_target("mint_nft") == f"{config.package_id}::dropforge::mint_nft"

    def test_overrides_ignore_none(self):
        config = NetworkConfig.for_network("testnet", rpc_url=None, epochs=9)

        assert config.rpc_url == NETWORKS["testnet"]["rpc_url"]
        assert config.epochs == 9

    def test_unknown_network(self):
        with pytest.raises(ValueError):
            NetworkConfig.for_network("moonnet")

    @pytest.mark.parametrize("overrides", [{"epochs": 0}, {"timeout": 0}])
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            NetworkConfig(**overrides)

    def test_missing_ids(self):
        """Test that presets without deployed ids refuse to build calls."""
        config = NetworkConfig.for_network("mainnet")

        with pytest.raises(ValueError):
            config.require_package()
        with pytest.raises(ValueError):
            config.require_registry()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DROPFORGE_NETWORK", "devnet")
        monkeypatch.setenv("DROPFORGE_PACKAGE_ID", "0xpkg")
        monkeypatch.setenv("DROPFORGE_EPOCHS", "3")

        config = NetworkConfig.from_env()

        assert config.network == "devnet"
        assert config.package_id == "0xpkg"
        assert config.epochs == 3

    def test_configs_are_independent(self):
        """Test that two networks can be used side by side."""
        testnet = NetworkConfig.for_network("testnet")
        devnet = testnet.with_overrides(network="devnet", rpc_url="https://rpc.dev")

        assert testnet.rpc_url == NETWORKS["testnet"]["rpc_url"]
        assert devnet.rpc_url == "https://rpc.dev"

    def test_mint_page_url(self):
        config = NetworkConfig(app_url="https://app.example/")

        assert config.mint_page_url("0xc") == "https://app.example/mint/0xc"
        assert NetworkConfig().mint_page_url("0xc") is None


class TestConfigurationManager:
    """Test layered configuration loading."""

    def test_defaults(self):
        manager = ConfigurationManager(search_paths=[], environ={})

        assert manager.get("network.name") == "testnet"
        assert manager.get("walrus.epochs") == 5
        assert manager.get("network.rpc_url", "fallback") == "fallback"
        assert manager.get_sources() == ["defaults"]

    def test_yaml_file(self, tmp_path):
        path = tmp_path / ".dropforge.yml"
        path.write_text(yaml.safe_dump({"network": {"name": "devnet"}, "walrus": {"epochs": 2}}))

        manager = ConfigurationManager(str(path), environ={})

        assert manager.get("network.name") == "devnet"
        assert manager.get("walrus.epochs") == 2
        # Deep merge keeps sibling defaults
        assert manager.get("network.timeout") == 30

    def test_search_path_first_match(self, tmp_path):
        first = tmp_path / "a.json"
        second = tmp_path / "b.json"
        first.write_text(json.dumps({"cli": {"max_workers": 8}}))
        second.write_text(json.dumps({"cli": {"max_workers": 2}}))

        manager = ConfigurationManager(search_paths=[tmp_path / "missing.yml", first, second], environ={})

        assert manager.get("cli.max_workers") == 8

    def test_environment_overrides_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"network": {"registry_id": "0xfile"}}))

        manager = ConfigurationManager(str(path), environ={
            "DROPFORGE_REGISTRY_ID": "0xenv",
            "DROPFORGE_EPOCHS": "4",
        })

        assert manager.get("network.registry_id") == "0xenv"
        assert manager.get("walrus.epochs") == 4
        assert "environment" in manager.get_sources()

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigurationManager(str(tmp_path / "nope.yml"), environ={}).load()

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError):
            ConfigurationManager(str(path), environ={}).load()

    def test_network_config(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text(yaml.safe_dump({
            "network": {"name": "testnet", "rpc_url": "https://rpc.custom"},
            "app": {"url": "https://app.example"},
        }))

        config = ConfigurationManager(str(path), environ={}).network_config()

        assert config.rpc_url == "https://rpc.custom"
        assert config.app_url == "https://app.example"
        assert config.publisher_url == NETWORKS["testnet"]["publisher_url"]

    def test_network_override(self):
        config = ConfigurationManager(search_paths=[], environ={}).network_config("devnet")

        assert config.network == "devnet"

    def test_set(self):
        manager = ConfigurationManager(search_paths=[], environ={})
        manager.set("cli.max_workers", 1)

        assert manager.get("cli.max_workers") == 1
