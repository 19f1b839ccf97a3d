"""
Tests for amount scaling, the asset cache and configuration.
"""

from decimal import Decimal

import pytest

import phantasma_sdk
from phantasma_sdk import AssetCache, ClientConfig, PhantasmaClient, TokenAsset, Utils
from phantasma_sdk.models import Balance, Token


def token(decimals, flags):
    return Token(
        symbol="T", name="T", decimals=decimals, current_supply="0", max_supply="0",
        owner_address="P1", metadata=[], flags=flags,
    )


class TestAmounts:
    def test_fungible_scaled_by_decimals(self):
        balance = Balance(chain="main", amount="150000000", symbol="SOUL", decimals=8)

        assert Utils.balance_amount(balance, token(8, "Transferable, Fungible")) == Decimal("1.5")

    def test_non_fungible_not_scaled(self):
        balance = Balance(chain="main", amount="3", symbol="CAR", decimals=0, ids=["1", "2", "3"])

        assert Utils.balance_amount(balance, token(8, "Transferable, Finite")) == Decimal(3)

    def test_invalid_amount(self):
        with pytest.raises(ValueError):
            Utils.scale_amount("lots", 8)

    def test_format_address(self):
        assert Utils.format_address("P2f7ZFuj6NfZ76ymNMnG3xRBT5hAMicDrQRHE4S7SoxEr", 8) == "P2f7ZFuj..."


class TestAssetCache:
    def test_ids_unique(self):
        cache = AssetCache()
        cache.insert(TokenAsset("1", "P1", None, None))

        with pytest.raises(ValueError):
            cache.insert(TokenAsset("1", "P2", None, None))

    def test_replace_all_rejects_duplicates_atomically(self):
        cache = AssetCache()
        cache.insert(TokenAsset("1", "P1", None, None))

        with pytest.raises(ValueError):
            cache.replace_all([TokenAsset("2", "P1", None, None), TokenAsset("2", "P1", None, None)])
        assert cache.ids() == ["1"]

    def test_remove(self):
        cache = AssetCache()
        cache.insert(TokenAsset("1", "P1", None, None))

        assert cache.remove("1").token_id == "1"
        assert "1" not in cache
        assert cache.remove("1") is None

    def test_single_resync_in_flight(self):
        cache = AssetCache()
        cache.begin_resync()

        with pytest.raises(RuntimeError):
            cache.begin_resync()
        cache.end_resync()
        cache.begin_resync()
        cache.end_resync()


class TestConfig:
    def test_defaults(self, monkeypatch):
        for name in ("PHANTASMA_RPC_URL", "PHANTASMA_TIMEOUT", "PHANTASMA_NEXUS", "PHANTASMA_CONFIRMATION_DELAY"):
            monkeypatch.delenv(name, raising=False)

        config = ClientConfig.from_env()

        assert config.rpc_url == "http://localhost:7077/rpc"
        assert config.confirmation_delay == 10.0

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("PHANTASMA_RPC_URL", "http://node.test/rpc")
        monkeypatch.setenv("PHANTASMA_NEXUS", "mainnet")
        monkeypatch.setenv("PHANTASMA_TIMEOUT", "5")

        client = PhantasmaClient.from_config(ClientConfig.from_env())

        assert client.host == "http://node.test/rpc"
        assert client.nexus == "mainnet"
        assert client.transport.timeout == 5.0
        client.close()


class TestPackage:
    def test_metadata(self):
        assert phantasma_sdk.__version__ == "0.1.0"
        assert phantasma_sdk.__author__
