"""Signature verification for transfers."""

from __future__ import annotations

from nacl.exceptions import BadSignatureError
from nacl.exceptions import CryptoError as _NaclCryptoError
from nacl.signing import VerifyKey

from zeroledger.types import Transfer

__all__ = ["CryptoError", "InvalidSignatureError", "verify_transfer"]


class CryptoError(Exception):
    """A key or signature could not be processed."""


class InvalidSignatureError(CryptoError):
    """A signature does not match the signed data."""

    def __init__(self, message: str = "invalid signature") -> None:
        super().__init__(message)


def verify_transfer(transfer: Transfer) -> None:
    """Check that the transfer was signed by its sender.

    Raises InvalidSignatureError when the signature does not verify.
    """
    try:
        key = VerifyKey(transfer.sender)
    except (_NaclCryptoError, ValueError, TypeError) as exc:
        raise CryptoError(str(exc)) from exc
    try:
        key.verify(transfer.signing_bytes(), transfer.signature)
    except BadSignatureError as exc:
        raise InvalidSignatureError() from exc
    except (_NaclCryptoError, ValueError, TypeError) as exc:
        raise CryptoError(str(exc)) from exc