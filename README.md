# megalib

A Python library with the building blocks of the MEGA cloud storage
protocol: URL-safe base64, the AES-128 modes MEGA uses (ECB, zero-IV CBC,
CTR with nonce and byte offset, chunk and meta MACs), RSA keys with public
exponent 3 in MEGA's MPI format, password key derivation and session-ID
decryption, and a JSON API client that retries while the server asks it to.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

| Module               | Contents                                                       |
|----------------------|----------------------------------------------------------------|
| `megalib.b64`        | `base64url_encode`, `base64url_decode`                         |
| `megalib.aes`        | AES-128 ECB/CBC/CTR helpers, `chunk_mac_calculate`, `meta_mac_calculate` |
| `megalib.random_key` | `make_random_key`                                              |
| `megalib.rsa`        | `MegaRsaKey`, `encode_mpi`, `read_mpi`, `mod_inverse`, `is_probably_prime` |
| `megalib.auth`       | `derive_key_v2`, `encrypt_key`, `decrypt_key`, `decrypt_private_key`, `decrypt_session_id` |
| `megalib.api`        | `ApiClient`, `ApiErrorCode`                                    |
| `megalib.errors`     | the exception classes                                          |

## Usage

### Base64

```python
from megalib.b64 import base64url_encode, base64url_decode

encoded = base64url_encode(b"Hello, MEGA!")   # no '=', '+' or '/'
assert base64url_decode(encoded) == b"Hello, MEGA!"
```

Invalid input to `base64url_decode` raises `megalib.errors.Base64Error`
(which is also a `ValueError`).

### AES

```python
from megalib.aes import aes128_ctr_encrypt, aes128_ctr_decrypt, chunk_mac_calculate
from megalib.random_key import make_random_key

key = make_random_key()          # 16 random bytes
nonce = key[:8]
ciphertext = aes128_ctr_encrypt(b"file contents", key, nonce, 0)
assert aes128_ctr_decrypt(ciphertext, key, nonce, 0) == b"file contents"

mac = chunk_mac_calculate(b"file contents", key, nonce + nonce)
```

The CTR counter block is the 8-byte nonce followed by a 64-bit big-endian
counter of `offset // 16`, so decryption can start at any byte offset and a
file may be processed in pieces. `chunk_mac_calculate` zero-pads a final
partial block; `meta_mac_calculate` folds a list of 16-byte chunk MACs into
one. ECB and CBC functions raise `ValueError` for data whose length is not a
multiple of 16, and every function raises `ValueError` for a key that is not
16 bytes.

### RSA

```python
from megalib.rsa import MegaRsaKey

rsa_key = MegaRsaKey.generate()          # 2048-bit modulus, e = 3
public_b64 = rsa_key.encode_public_key()
public_only = MegaRsaKey.from_encoded_public_key(public_b64)

ciphertext = public_only.encrypt(b"share key")
assert rsa_key.decrypt(ciphertext) == b"share key"
```

`MegaRsaKey` is a frozen dataclass with integer fields `p`, `q`, `d`, `u`
(p⁻¹ mod q), `m` (the modulus) and `e`; a key read from a public encoding has
`p`, `q`, `d` and `u` set to zero. `encode_private_key(master_key)` writes
p, q, d and u as MPIs, zero-pads them and encrypts them with AES-128-ECB.
`encrypt` and `decrypt` are raw RSA without padding; `decrypt` returns `None`
for empty input.

### Authentication helpers

```python
from megalib.auth import derive_key_v2, encrypt_key, decrypt_key
from megalib.b64 import base64url_encode

password = "password"
derived = derive_key_v2(password, b"salt")   # PBKDF2-HMAC-SHA512, 100,000 rounds, 32 bytes
password_key = derived[:16]

master_key = bytes(16)
stored = base64url_encode(encrypt_key(master_key, password_key))
assert decrypt_key(stored, password_key) == master_key
```

`decrypt_private_key(b64, master_key)` turns an encrypted private key into a
`MegaRsaKey`, and `decrypt_session_id(csid_b64, rsa_key)` decrypts a session
ID with it and returns the first 43 bytes in URL-safe base64. Malformed
input raises `CryptoError`.

### API client

```python
from megalib.api import ApiClient

with ApiClient() as client:
    reply = client.request({"a": "us", "user": "someone@example.com"})
```

- `ApiClient(proxy="http://127.0.0.1:8080")` sends requests through a proxy;
  a proxy string without a scheme and host raises `RequestError`.
- Set `client.session_id` to authenticate requests; it is added to the URL as
  `sid`. Leave it as `None` to send them anonymously.
- `request` sends one command and returns its result; `request_batch` sends
  several and returns the whole reply list (an empty list for no commands).
- A numeric reply from the server raises `ApiError` carrying the code and its
  description (see `ApiErrorCode.from_code` and `ApiErrorCode.description`).
  While the server answers "try again" (-3) the client waits 250 ms, doubling
  each time, and raises `ServerBusyError` once the wait would pass 256 s.
- A non-success HTTP status raises `HttpError`, a network failure
  `RequestError`, an unparsable reply `JsonError`, and a reply to `request`
  that is not a non-empty list `InvalidResponseError`.
- Call `close()`, or use the client as a context manager, to release its
  connections.

## Errors

Every error the library raises derives from `megalib.errors.MegaError`:
`HttpError`, `RequestError`, `JsonError`, `ServerBusyError`,
`InvalidResponseError`, `ApiError`, `CryptoError`, `InvalidChallengeError`,
`Base64Error` and `InvalidStateError`.

## What this package does not do

It provides the protocol primitives and the request layer only. There is no
logged-in session object, no file tree listing, no upload or download of
files, no public link or folder handling, no sharing, no password change and
no account registration, and it has no command-line tools.