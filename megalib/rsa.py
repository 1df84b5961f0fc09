"""RSA keys in the MEGA format (2048-bit modulus, public exponent 3)."""

from __future__ import annotations

import secrets
from dataclasses import dataclass

from .aes import aes128_ecb_encrypt
from .b64 import base64url_decode, base64url_encode
from .errors import Base64Error, CryptoError

PUBLIC_EXPONENT = 3
_PRIME_BITS = 1024
_PRIME_ATTEMPTS = 10_000
_MR_ROUNDS = 20
_SMALL_PRIMES = (
    3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59, 61, 67, 71,
    73, 79, 83, 89, 97, 101, 103, 107, 109, 113, 127, 131, 137, 139, 149, 151,
    157, 163, 167, 173, 179, 181, 191, 193, 197, 199, 211, 223, 227, 229, 233,
)


def _to_bytes(n: int) -> bytes:
    """Big-endian bytes of ``n``; zero becomes a single zero byte."""
    return n.to_bytes(max(1, (n.bit_length() + 7) // 8), "big")


def encode_mpi(n: int) -> bytes:
    """Encode a non-negative integer as an MPI: 2-byte bit length, then the bytes."""
    if n < 0:
        raise ValueError("MPI must not be negative")
    bit_len = n.bit_length()
    if bit_len > 0xFFFF:
        raise ValueError(f"MPI too large: {bit_len} bits")
    return bit_len.to_bytes(2, "big") + _to_bytes(n)


def read_mpi(data: bytes, pos: int = 0) -> tuple[int, int]:
    """Read an MPI from ``data`` at ``pos``; return the value and the next position.

    Raises CryptoError if the data is truncated.
    """
    if pos + 2 > len(data):
        raise CryptoError("MPI truncated")
    bit_len = int.from_bytes(data[pos:pos + 2], "big")
    byte_len = (bit_len + 7) // 8
    pos += 2
    if pos + byte_len > len(data):
        raise CryptoError("MPI data truncated")
    value = int.from_bytes(data[pos:pos + byte_len], "big")
    return value, pos + byte_len


def mod_inverse(a: int, m: int) -> int | None:
    """Return ``a`` inverse modulo ``m``, or None if it does not exist."""
    try:
        return pow(a, -1, m)
    except ValueError:
        return None


def is_probably_prime(n: int, rounds: int) -> bool:
    """Miller-Rabin probabilistic primality test with ``rounds`` random witnesses."""
    if n <= 1:
        return False
    if n in (2, 3):
        return True
    if n % 2 == 0:
        return False

    n_minus_1 = n - 1
    d = n_minus_1
    r = 0
    while d % 2 == 0:
        d >>= 1
        r += 1

    for _ in range(rounds):
        a = 2 + secrets.randbelow(n - 3)  # in [2, n-2]
        x = pow(a, d, n)
        if x in (1, n_minus_1):
            continue
        for _ in range(r - 1):
            x = pow(x, 2, n)
            if x == n_minus_1:
                break
        else:
            return False
    return True


def _generate_prime_for_e3(bits: int) -> int:
    """Random ``bits``-bit prime p with p % 3 == 2, so gcd(3, p - 1) == 1."""
    for _ in range(_PRIME_ATTEMPTS):
        candidate = secrets.randbits(bits) | (1 << (bits - 1)) | 1
        remainder = candidate % 3
        if remainder == 0:
            candidate += 2
        elif remainder == 1:
            candidate += 1
        if any(candidate % sp == 0 for sp in _SMALL_PRIMES):
            continue
        if is_probably_prime(candidate, _MR_ROUNDS):
            return candidate
    raise CryptoError(f"Failed to generate prime after {_PRIME_ATTEMPTS} attempts")


@dataclass(frozen=True)
class MegaRsaKey:
    """RSA key components; a public-only key has p, q, d and u set to zero."""

    p: int
    q: int
    d: int
    u: int
    m: int
    e: int

    @classmethod
    def generate(cls) -> MegaRsaKey:
        """Generate a new 2048-bit key with public exponent 3."""
        e = PUBLIC_EXPONENT
        p = _generate_prime_for_e3(_PRIME_BITS)
        q = _generate_prime_for_e3(_PRIME_BITS)
        m = p * q
        phi = (p - 1) * (q - 1)
        d = mod_inverse(e, phi)
        if d is None:
            raise CryptoError("Failed to compute private exponent")
        u = mod_inverse(p, q)
        if u is None:
            raise CryptoError("Failed to compute CRT coefficient")
        return cls(p=p, q=q, d=d, u=u, m=m, e=e)

    @classmethod
    def from_encoded_public_key(cls, b64: str) -> MegaRsaKey:
        """Parse a public key encoded as base64 of MPI(m) followed by MPI(e)."""
        try:
            data = base64url_decode(b64)
        except Base64Error as exc:
            raise CryptoError("Invalid base64") from exc
        m, pos = read_mpi(data, 0)
        e, _ = read_mpi(data, pos)
        return cls(p=0, q=0, d=0, u=0, m=m, e=e)

    def encode_public_key(self) -> str:
        """Encode the public key as base64 of MPI(m) followed by MPI(e)."""
        return base64url_encode(encode_mpi(self.m) + encode_mpi(self.e))

    def encode_private_key(self, master_key: bytes) -> str:
        """Encode p, q, d, u as MPIs, zero-pad to 16 bytes and AES-ECB encrypt."""
        data = b"".join(encode_mpi(n) for n in (self.p, self.q, self.d, self.u))
        data += bytes(-len(data) % 16)
        return base64url_encode(aes128_ecb_encrypt(data, master_key))

    def decrypt(self, ciphertext: bytes) -> bytes | None:
        """Raw RSA decryption c^d mod n; None for empty input."""
        if not ciphertext:
            return None
        c = int.from_bytes(ciphertext, "big")
        return _to_bytes(pow(c, self.d, self.m))

    def encrypt(self, plaintext: bytes) -> bytes:
        """Raw RSA encryption m^e mod n."""
        value = int.from_bytes(plaintext, "big")
        return _to_bytes(pow(value, self.e, self.m))