"""
Cryptographic utilities for Phantasma
"""

import hashlib
from datetime import datetime, timezone
from typing import Optional

import base58
from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from .models import SignedTransaction
from .serialization import BinaryWriter

ADDRESS_PREFIX = "P"
ADDRESS_BODY_LENGTH = 44
WIF_VERSION = b'\x80'
WIF_COMPRESSED = b'\x01'
SIGNATURE_ED25519 = 1


class KeyPair:
    """
    Ed25519 key pair with Phantasma text encodings.

    The address is "P" followed by the base58 public key, padded to 45
    characters. It is not the node's native address encoding, so a WIF
    key yields a different address text here than in node wallets.

    Example:
        >>> keys = KeyPair.from_wif("L2LGgkZAdupN2ee8Rs6hpkc65zaGcLbxhbSDGq8oh6umUxxzeW25")
        >>> print(keys.address)
    """

    def __init__(self, private_key: bytes):
        if len(private_key) != 32:
            raise ValueError("private key must be 32 bytes")
        self._signing_key = SigningKey(private_key)
        self.private_key = private_key
        self.public_key = self._signing_key.verify_key.encode()
        self.address = address_from_public_key(self.public_key)

    @classmethod
    def generate(cls) -> "KeyPair":
        """Generate a new random key pair"""
        return cls(SigningKey.generate().encode())

    @classmethod
    def from_wif(cls, wif: str) -> "KeyPair":
        """
        Load a key pair from its WIF text.

        Raises:
            ValueError: If the text is not a compressed WIF key
        """
        data = base58.b58decode_check(wif)
        if len(data) != 34 or data[:1] != WIF_VERSION or data[33:] != WIF_COMPRESSED:
            raise ValueError("invalid WIF private key")
        return cls(data[1:33])

    def to_wif(self) -> str:
        return base58.b58encode_check(WIF_VERSION + self.private_key + WIF_COMPRESSED).decode('ascii')

    def sign(self, message: bytes) -> bytes:
        return self._signing_key.sign(message).signature

    def __repr__(self):
        return f"KeyPair({self.address})"


def address_from_public_key(public_key: bytes) -> str:
    """Text address of an Ed25519 public key, padded with '1' to a fixed width"""
    body = base58.b58encode(public_key).decode('ascii')
    return ADDRESS_PREFIX + body.rjust(ADDRESS_BODY_LENGTH, '1')


def public_key_from_address(address: str) -> bytes:
    if not address.startswith(ADDRESS_PREFIX):
        raise ValueError(f"not a Phantasma address: {address}")
    data = base58.b58decode(address[1:])
    padding, public_key = data[:-32], data[-32:]
    if len(public_key) != 32 or any(padding):
        raise ValueError(f"not a Phantasma address: {address}")
    return public_key


def unsigned_transaction_bytes(tx: SignedTransaction) -> bytes:
    writer = BinaryWriter()
    writer.write_string(tx.nexus)
    writer.write_string(tx.chain)
    writer.write_bytes(tx.script)
    writer.write_uint32(tx.expiration)
    return writer.to_bytes()


def transaction_to_bytes(tx: SignedTransaction, with_signature: bool = True) -> bytes:
    """
    Serialize a transaction envelope.

    Args:
        tx: Transaction envelope
        with_signature: Append the signature list (default: True)

    Returns:
        Binary envelope
    """
    data = unsigned_transaction_bytes(tx)
    if not with_signature:
        return data
    writer = BinaryWriter()
    writer.write_var_int(len(tx.signatures))
    for signature in tx.signatures:
        writer.write_byte(SIGNATURE_ED25519)
        writer.write_bytes(signature)
    return data + writer.to_bytes()


def transaction_hash(tx: SignedTransaction) -> str:
    """Hash of the unsigned envelope, hex encoded"""
    return hashlib.sha256(unsigned_transaction_bytes(tx)).hexdigest()


class PhantasmaCrypto:
    """
    Signing and verification of transaction envelopes.

    Uses Ed25519 signatures via PyNaCl.
    """

    @staticmethod
    def sign_transaction(
        keys: KeyPair,
        nexus: str,
        chain: str,
        script: bytes,
        expiration: datetime
    ) -> SignedTransaction:
        """
        Sign a transaction.

        Args:
            keys: Signer key pair
            nexus: Network name (e.g. "simnet")
            chain: Target chain name (e.g. "main")
            script: Script bytes from ScriptBuilder
            expiration: Time after which the node rejects the transaction

        Returns:
            Signed transaction envelope

        Example:
            >>> expiration = datetime.now(timezone.utc) + timedelta(hours=1)
            >>> tx = PhantasmaCrypto.sign_transaction(keys, "simnet", "main", script, expiration)
        """
        tx = SignedTransaction(
            nexus=nexus,
            chain=chain,
            script=script,
            expiration=_to_timestamp(expiration),
        )
        tx.signatures.append(keys.sign(unsigned_transaction_bytes(tx)))
        return tx

    @staticmethod
    def verify_transaction(tx: SignedTransaction, address: str) -> bool:
        """
        Verify that a transaction carries a valid signature from an address.

        Args:
            tx: Signed transaction envelope
            address: Expected signer address

        Returns:
            True if one of the signatures verifies, False otherwise
        """
        try:
            verify_key = VerifyKey(public_key_from_address(address))
        except ValueError:
            return False
        message = unsigned_transaction_bytes(tx)
        for signature in tx.signatures:
            try:
                verify_key.verify(message, signature)
                return True
            except BadSignatureError:
                continue
        return False


def _to_timestamp(moment: Optional[datetime]) -> int:
    if moment is None:
        moment = datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp())
