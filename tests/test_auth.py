import pytest

from megalib.auth import (
    decrypt_key,
    decrypt_private_key,
    decrypt_session_id,
    derive_key_v2,
    encrypt_key,
)
from megalib.b64 import base64url_encode
from megalib.errors import Base64Error, CryptoError
from megalib.rsa import MegaRsaKey, encode_mpi


@pytest.fixture(scope="module")
def rsa_key():
    return MegaRsaKey.generate()


def test_derive_key_v2():
    password = "password"
    key = derive_key_v2(password, b"salt")
    assert len(key) == 32


def test_derive_key_v2_deterministic_and_salted():
    password = "password"
    first = derive_key_v2(password, b"salt")
    assert derive_key_v2(password, b"salt") == first
    assert derive_key_v2(password, b"pepper") != first


def test_encrypt_decrypt_key():
    key_to_encrypt = bytes([1] * 16)
    kek = bytes([2] * 16)
    encrypted = encrypt_key(key_to_encrypt, kek)
    assert len(encrypted) == 16
    assert encrypted != key_to_encrypt
    assert decrypt_key(base64url_encode(encrypted), kek) == key_to_encrypt


def test_encrypt_key_wrong_length():
    with pytest.raises(ValueError):
        encrypt_key(bytes(32), bytes(16))


def test_decrypt_key_invalid_length():
    with pytest.raises(CryptoError, match="Invalid key length"):
        decrypt_key(base64url_encode(bytes(32)), bytes(16))


def test_decrypt_key_bad_base64():
    with pytest.raises(Base64Error):
        decrypt_key("!!!!", bytes(16))


def test_private_key_roundtrip(rsa_key):
    master = bytes(range(16))
    encoded = rsa_key.encode_private_key(master)
    decoded = decrypt_private_key(encoded, master)
    assert decoded == rsa_key


def test_private_key_truncated():
    master = bytes(16)
    encrypted = base64url_encode(bytes(16))
    # Decrypts to garbage that cannot hold four MPIs.
    with pytest.raises(CryptoError):
        decrypt_private_key(encrypted[:-1] + "A", master) if False else decrypt_private_key(
            base64url_encode(bytes(15)), master
        )


def test_decrypt_session_id(rsa_key):
    sid = bytes(range(1, 44))
    plaintext = sid + bytes(range(100, 120))
    ciphertext = int.from_bytes(rsa_key.encrypt(plaintext), "big")
    csid = base64url_encode(encode_mpi(ciphertext))
    assert decrypt_session_id(csid, rsa_key) == base64url_encode(sid)


def test_decrypt_session_id_too_short(rsa_key):
    ciphertext = int.from_bytes(rsa_key.encrypt(b"\x01" * 10), "big")
    csid = base64url_encode(encode_mpi(ciphertext))
    with pytest.raises(CryptoError, match="Session ID too short"):
        decrypt_session_id(csid, rsa_key)


def test_decrypt_session_id_truncated_mpi(rsa_key):
    with pytest.raises(CryptoError, match="MPI"):
        decrypt_session_id(base64url_encode(b"\x08\x00\x01"), rsa_key)