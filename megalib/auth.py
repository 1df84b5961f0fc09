"""Key derivation and decryption used while logging in."""

from __future__ import annotations

import hashlib

from .aes import aes128_ecb_decrypt, aes128_ecb_encrypt
from .b64 import base64url_decode, base64url_encode
from .errors import CryptoError
from .rsa import PUBLIC_EXPONENT, MegaRsaKey, read_mpi

_PBKDF2_ITERATIONS = 100_000
_SESSION_ID_LEN = 43


def derive_key_v2(password: str, salt: bytes) -> bytes:
    """Derive a 32-byte key with PBKDF2-HMAC-SHA512 (100,000 iterations)."""
    return hashlib.pbkdf2_hmac(
        "sha512", password.encode("utf-8"), bytes(salt), _PBKDF2_ITERATIONS, 32
    )


def encrypt_key(key_to_encrypt: bytes, password_key: bytes) -> bytes:
    """Encrypt a 16-byte key with AES-128-ECB."""
    if len(key_to_encrypt) != 16:
        raise ValueError(f"Key must be 16 bytes, got {len(key_to_encrypt)}")
    return aes128_ecb_encrypt(key_to_encrypt, password_key)


def decrypt_key(b64: str, password_key: bytes) -> bytes:
    """Decrypt a base64-encoded 16-byte key with AES-128-ECB."""
    data = base64url_decode(b64)
    if len(data) != 16:
        raise CryptoError("Invalid key length")
    return aes128_ecb_decrypt(data, password_key)


def decrypt_private_key(b64: str, master_key: bytes) -> MegaRsaKey:
    """Decrypt an RSA private key stored as encrypted MPIs p, q, d, u."""
    encrypted = base64url_decode(b64)
    if len(encrypted) % 16:
        raise CryptoError("Invalid private key length")
    decrypted = aes128_ecb_decrypt(encrypted, master_key)

    pos = 0
    values = []
    for _ in range(4):
        value, pos = read_mpi(decrypted, pos)
        values.append(value)
    p, q, d, u = values
    return MegaRsaKey(p=p, q=q, d=d, u=u, m=p * q, e=PUBLIC_EXPONENT)


def decrypt_session_id(csid_b64: str, rsa_key: MegaRsaKey) -> str:
    """Decrypt the session id with the private key; return its first 43 bytes, encoded."""
    data = base64url_decode(csid_b64)
    ciphertext, _ = read_mpi(data, 0)
    plaintext = _rsa_decrypt_crt(ciphertext, rsa_key.d, rsa_key.p, rsa_key.q, rsa_key.u)
    plaintext_bytes = plaintext.to_bytes(max(1, (plaintext.bit_length() + 7) // 8), "big")
    if len(plaintext_bytes) < _SESSION_ID_LEN:
        raise CryptoError("Session ID too short")
    return base64url_encode(plaintext_bytes[:_SESSION_ID_LEN])


def _rsa_decrypt_crt(c: int, d: int, p: int, q: int, u: int) -> int:
    """RSA decryption using the CRT, with u = p^-1 mod q."""
    xp = pow(c % p, d % (p - 1), p)
    xq = pow(c % q, d % (q - 1), q)
    t = ((xq - xp) * u) % q
    return t * p + xp