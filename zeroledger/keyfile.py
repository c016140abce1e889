"""Storing and loading secret keys as hex files."""

from __future__ import annotations

import binascii
import os
from pathlib import Path

from zeroledger.keypair import KeyPair

__all__ = ["KeyFileError", "generate_and_save", "load"]


class KeyFileError(Exception):
    """A key file could not be read or holds an invalid key."""


def generate_and_save(path: str | os.PathLike[str]) -> KeyPair:
    """Generate a keypair and write its 32-byte secret to ``path`` as hex."""
    kp = KeyPair.generate()
    Path(path).write_text(kp.secret_key().hex())
    return kp


def load(path: str | os.PathLike[str]) -> KeyPair:
    """Load a keypair from a hex-encoded 32-byte secret key file."""
    path = Path(path)
    try:
        contents = path.read_text()
    except (OSError, UnicodeDecodeError) as exc:
        raise KeyFileError(f"Failed to read key file {path}: {exc}") from exc

    try:
        secret = binascii.unhexlify(contents.strip())
    except (binascii.Error, ValueError) as exc:
        raise KeyFileError(f"Invalid hex in key file: {exc}") from exc

    if len(secret) != 32:
        raise KeyFileError("Key file must contain exactly 32 bytes (64 hex chars)")
    return KeyPair.from_secret(secret)