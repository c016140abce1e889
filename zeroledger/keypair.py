"""Ed25519 keypairs for signing transfers."""

from __future__ import annotations

from nacl.signing import SigningKey, VerifyKey

from zeroledger.types import Transfer

__all__ = ["KeyPair"]

_SECRET_LEN = 32


class KeyPair:
    """An Ed25519 keypair."""

    def __init__(self, signing_key: SigningKey) -> None:
        self._signing = signing_key

    @classmethod
    def generate(cls) -> KeyPair:
        """Generate a new random keypair."""
        return cls(SigningKey.generate())

    @classmethod
    def from_secret(cls, secret: bytes) -> KeyPair:
        """Restore a keypair from its 32-byte secret."""
        secret = bytes(secret)
        if len(secret) != _SECRET_LEN:
            raise ValueError(f"secret key must be {_SECRET_LEN} bytes")
        return cls(SigningKey(secret))

    def public_key(self) -> bytes:
        """The 32-byte public key."""
        return bytes(self._signing.verify_key)

    def secret_key(self) -> bytes:
        """The 32-byte secret key."""
        return bytes(self._signing)

    def sign(self, message: bytes) -> bytes:
        """Sign arbitrary data, returning a 64-byte signature."""
        return self._signing.sign(bytes(message)).signature

    def sign_transfer(self, transfer: Transfer) -> bytes:
        """Sign a transfer's signing bytes."""
        return self.sign(transfer.signing_bytes())

    def verifying_key(self) -> VerifyKey:
        """The verifying key matching this keypair."""
        return self._signing.verify_key