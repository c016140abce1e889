import pytest

from zeroledger.keypair import KeyPair
from zeroledger.types import Transfer

SECRET_HEX = "4ccd089b28ff96da9db6c346ec114e0f5b8a319f35aba624da8cf6ed4fb8a6fb"
PUBLIC_HEX = "3d4017c3e843895a92b70aa74d1b7ebc9c982ccf2ec4968cc0cd55f12af4660c"


def test_known_secret_gives_known_public_key():
    kp = KeyPair.from_secret(bytes.fromhex(SECRET_HEX))
    assert kp.public_key().hex() == PUBLIC_HEX


def test_key_derivation_is_deterministic():
    secret = bytes.fromhex(SECRET_HEX)
    first = KeyPair.from_secret(secret).public_key()
    second = KeyPair.from_secret(secret).public_key()
    assert first == second
    assert second.hex() == PUBLIC_HEX


def test_known_signature():
    kp = KeyPair.from_secret(bytes.fromhex(SECRET_HEX))
    assert kp.sign(b"\x72").hex() == (
        "92a009a9f0d4cab8720e820b5f642540a2b27b5416503f8f"
        "b3762223ebdb69da085ac1e43e15996e458f3613d0f11d8c"
        "387b2eaeb4302aeeb00d291612bb0c00"
    )


def test_generate_and_sign_verifies():
    kp = KeyPair.generate()
    msg = b"test message"
    sig = kp.sign(msg)
    assert len(sig) == 64
    assert kp.verifying_key().verify(msg, sig) == msg


def test_from_secret_roundtrip():
    kp1 = KeyPair.generate()
    kp2 = KeyPair.from_secret(kp1.secret_key())
    assert kp1.public_key() == kp2.public_key()
    assert kp2.secret_key() == kp1.secret_key()


def test_sign_transfer_signs_signing_bytes():
    kp = KeyPair.from_secret(bytes.fromhex(SECRET_HEX))
    tx = Transfer(sender=kp.public_key(), receiver=b"\x02" * 32, amount=100, nonce=1)
    assert kp.sign_transfer(tx) == kp.sign(tx.signing_bytes())
    assert len(kp.sign_transfer(tx)) == 64


def test_from_secret_rejects_wrong_length():
    with pytest.raises(ValueError, match="32 bytes"):
        KeyPair.from_secret(b"\x00" * 31)