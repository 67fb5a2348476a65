"""Transaction signing with a local keypair."""

from typing import Protocol

from solders.keypair import Keypair
from solders.transaction import VersionedTransaction


class TransactionSigner(Protocol):
    """Protocol for signing serialized swap transactions."""

    @property
    def public_key(self) -> str:
        """Base58 public key of the signing wallet."""
        ...

    def sign(self, transaction: bytes) -> bytes:
        """Sign a serialized transaction and return the signed bytes."""
        ...


class KeypairSigner:
    """Signs versioned transactions with an in-memory keypair."""

    def __init__(self, keypair: Keypair) -> None:
        self._keypair = keypair

    @classmethod
    def from_base58(cls, secret: str) -> "KeypairSigner":
        """Create a signer from a base58-encoded secret key."""
        return cls(Keypair.from_base58_string(secret))

    @property
    def public_key(self) -> str:
        return str(self._keypair.pubkey())

    def sign(self, transaction: bytes) -> bytes:
        unsigned = VersionedTransaction.from_bytes(transaction)
        signed = VersionedTransaction(unsigned.message, [self._keypair])
        return bytes(signed)
