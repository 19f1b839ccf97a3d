"""
Tests for key handling, signing and the binary codec.
"""

from datetime import datetime, timezone

import pytest

from phantasma_sdk import KeyPair, PhantasmaCrypto, ScriptBuilder, Utils
from phantasma_sdk.crypto import (
    address_from_public_key,
    public_key_from_address,
    transaction_hash,
    transaction_to_bytes,
)
from phantasma_sdk.events import EventKind, decode_token_create, parse_event_kind
from phantasma_sdk.models import Event
from phantasma_sdk.serialization import BinaryReader, BinaryWriter, encode_hex, serialize_string


class TestKeyPair:
    def test_wif_round_trip(self):
        keys = KeyPair.generate()
        wif = keys.to_wif()

        assert Utils.is_valid_private_key(wif)
        assert KeyPair.from_wif(wif).address == keys.address

    def test_address_prefix(self):
        assert KeyPair.generate().address.startswith("P")

    def test_generated_addresses_validate(self):
        for _ in range(200):
            keys = KeyPair.generate()

            assert Utils.is_valid_address(keys.address)
            assert public_key_from_address(keys.address) == keys.public_key

    def test_short_public_key_text_is_padded(self):
        for public_key in (bytes(32), b"\x00" + b"\x01" * 31, b"\x01" + bytes(31)):
            address = address_from_public_key(public_key)

            assert len(address) == 45
            assert public_key_from_address(address) == public_key

    def test_rejects_bad_wif(self):
        with pytest.raises(ValueError):
            KeyPair.from_wif("L2LGgkZAdupN2ee8Rs6hpkc65zaGcLbxhbSDGq8oh6umUxxzeW2")


class TestSigning:
    def setup_method(self):
        self.keys = KeyPair.generate()
        self.script = ScriptBuilder().allow_gas(self.keys.address, 1, 9999).spend_gas(self.keys.address).end_script()
        self.expiration = datetime(2030, 1, 1, tzinfo=timezone.utc)

    def test_sign_and_verify(self):
        tx = PhantasmaCrypto.sign_transaction(self.keys, "simnet", "main", self.script, self.expiration)

        assert tx.expiration == int(self.expiration.timestamp())
        assert len(tx.signatures) == 1
        assert PhantasmaCrypto.verify_transaction(tx, self.keys.address)
        assert not PhantasmaCrypto.verify_transaction(tx, KeyPair.generate().address)

    def test_tampered_script_fails(self):
        tx = PhantasmaCrypto.sign_transaction(self.keys, "simnet", "main", self.script, self.expiration)
        tx.script = tx.script + b"\x00"

        assert not PhantasmaCrypto.verify_transaction(tx, self.keys.address)

    def test_hash_ignores_signature(self):
        tx = PhantasmaCrypto.sign_transaction(self.keys, "simnet", "main", self.script, self.expiration)
        signed = transaction_to_bytes(tx)
        unsigned = transaction_to_bytes(tx, with_signature=False)

        assert signed.startswith(unsigned)
        assert len(signed) > len(unsigned)
        assert transaction_hash(tx) == transaction_hash(
            PhantasmaCrypto.sign_transaction(self.keys, "simnet", "main", self.script, self.expiration)
        )


class TestCodec:
    def test_var_int_widths(self):
        writer = BinaryWriter().write_var_int(0xFC).write_var_int(0xFD).write_var_int(0x10000)
        data = writer.to_bytes()

        assert len(data) == 1 + 3 + 5
        reader = BinaryReader(data)
        assert [reader.read_var_int() for _ in range(3)] == [0xFC, 0xFD, 0x10000]

    def test_big_integer_sign(self):
        reader = BinaryReader(BinaryWriter().write_big_integer(-129).write_big_integer(128).to_bytes())

        assert reader.read_big_integer() == -129
        assert reader.read_big_integer() == 128

    def test_truncated_input(self):
        with pytest.raises(ValueError):
            BinaryReader(b"\x05ab").read_string()

    def test_script_argument_types(self):
        with pytest.raises(TypeError):
            ScriptBuilder().call_contract("token", "MintToken", 1.5)


class TestEvents:
    def test_parse_kind(self):
        assert parse_event_kind("TokenMint") is EventKind.TokenMint
        assert parse_event_kind("2") is EventKind.TokenCreate
        assert parse_event_kind("Teleport") is None

    def test_token_create_symbol(self):
        event = Event(address="P1", kind="TokenCreate", data=encode_hex(serialize_string("CAR")))

        assert decode_token_create(event) == "CAR"


class TestValidation:
    ADDRESS = "P2f7ZFuj6NfZ76ymNMnG3xRBT5hAMicDrQRHE4S7SoxEr"
    PRIVATE_KEY = "L2LGgkZAdupN2ee8Rs6hpkc65zaGcLbxhbSDGq8oh6umUxxzeW25"

    def test_address(self):
        assert Utils.is_valid_address(self.ADDRESS)
        assert not Utils.is_valid_address(self.ADDRESS[:-1])
        assert not Utils.is_valid_address("X" + self.ADDRESS[1:])

    def test_private_key(self):
        assert Utils.is_valid_private_key(self.PRIVATE_KEY)
        assert Utils.is_valid_private_key("K" + self.PRIVATE_KEY[1:])
        assert not Utils.is_valid_private_key(self.PRIVATE_KEY[:-1])

    def test_key_is_not_an_address(self):
        assert not Utils.is_valid_address(self.PRIVATE_KEY)
