"""AES-128 primitives in the modes the MEGA protocol needs."""

from __future__ import annotations

from collections.abc import Iterable

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

BLOCK_SIZE = 16
_ZERO_BLOCK = bytes(BLOCK_SIZE)


def _check_key(key: bytes) -> bytes:
    key = bytes(key)
    if len(key) != 16:
        raise ValueError(f"Key must be 16 bytes, got {len(key)}")
    return key


def _check_block(data: bytes) -> bytes:
    data = bytes(data)
    if len(data) != BLOCK_SIZE:
        raise ValueError(f"Block must be 16 bytes, got {len(data)}")
    return data


def _check_multiple(data: bytes) -> bytes:
    data = bytes(data)
    if len(data) % BLOCK_SIZE:
        raise ValueError(f"Data length must be multiple of 16, got {len(data)}")
    return data


def _run(mode: modes.Mode, key: bytes, data: bytes, encrypt: bool) -> bytes:
    cipher = Cipher(algorithms.AES(_check_key(key)), mode)
    ctx = cipher.encryptor() if encrypt else cipher.decryptor()
    return ctx.update(data) + ctx.finalize()


def aes128_ecb_encrypt_block(data: bytes, key: bytes) -> bytes:
    """Encrypt a single 16-byte block with AES-128-ECB."""
    return _run(modes.ECB(), key, _check_block(data), True)


def aes128_ecb_decrypt_block(data: bytes, key: bytes) -> bytes:
    """Decrypt a single 16-byte block with AES-128-ECB."""
    return _run(modes.ECB(), key, _check_block(data), False)


def aes128_ecb_encrypt(data: bytes, key: bytes) -> bytes:
    """Encrypt data whose length is a multiple of 16 with AES-128-ECB."""
    return _run(modes.ECB(), key, _check_multiple(data), True)


def aes128_ecb_decrypt(data: bytes, key: bytes) -> bytes:
    """Decrypt data whose length is a multiple of 16 with AES-128-ECB."""
    return _run(modes.ECB(), key, _check_multiple(data), False)


def aes128_cbc_encrypt(data: bytes, key: bytes) -> bytes:
    """Encrypt with AES-128-CBC and an all-zero IV, no padding."""
    return _run(modes.CBC(_ZERO_BLOCK), key, _check_multiple(data), True)


def aes128_cbc_decrypt(data: bytes, key: bytes) -> bytes:
    """Decrypt with AES-128-CBC and an all-zero IV, no padding."""
    return _run(modes.CBC(_ZERO_BLOCK), key, _check_multiple(data), False)


def aes128_ctr_decrypt(data: bytes, key: bytes, nonce: bytes, offset: int) -> bytes:
    """Apply AES-128-CTR keystream starting at byte ``offset`` of the stream.

    The counter block is the 8-byte nonce followed by a 64-bit big-endian
    counter equal to ``offset // 16``.
    """
    nonce = bytes(nonce)
    if len(nonce) != 8:
        raise ValueError(f"Nonce must be 8 bytes, got {len(nonce)}")
    if offset < 0:
        raise ValueError("Offset must not be negative")
    data = bytes(data)
    if not data:
        return b""
    counter_block = nonce + (offset // BLOCK_SIZE).to_bytes(8, "big")
    skip = offset % BLOCK_SIZE
    out = _run(modes.CTR(counter_block), key, bytes(skip) + data, True)
    return out[skip:]


def aes128_ctr_encrypt(data: bytes, key: bytes, nonce: bytes, offset: int) -> bytes:
    """AES-128-CTR encryption; identical to decryption."""
    return aes128_ctr_decrypt(data, key, nonce, offset)


def _cbc_mac(data: bytes, key: bytes, iv: bytes) -> bytes:
    if not data:
        _check_key(key)
        return iv
    padded = data + bytes(-len(data) % BLOCK_SIZE)
    return _run(modes.CBC(iv), key, padded, True)[-BLOCK_SIZE:]


def chunk_mac_calculate(data: bytes, key: bytes, iv: bytes) -> bytes:
    """CBC-MAC of a chunk, zero-padding the final partial block."""
    return _cbc_mac(bytes(data), key, _check_block(iv))


def meta_mac_calculate(chunk_macs: Iterable[bytes], key: bytes) -> bytes:
    """CBC-MAC over the chunk MACs in order, starting from a zero block."""
    joined = b"".join(_check_block(mac) for mac in chunk_macs)
    return _cbc_mac(joined, key, _ZERO_BLOCK)