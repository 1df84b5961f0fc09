import pytest

from megalib.b64 import base64url_decode, base64url_encode
from megalib.errors import Base64Error, MegaError


def test_roundtrip():
    original = b"Hello, MEGA!"
    encoded = base64url_encode(original)
    assert base64url_decode(encoded) == original


def test_no_padding():
    encoded = base64url_encode(b"test")
    assert "=" not in encoded


def test_url_safe_chars():
    data = bytes(range(255))
    encoded = base64url_encode(data)
    assert "+" not in encoded
    assert "/" not in encoded
    assert base64url_decode(encoded) == data


def test_decode_with_url_safe_chars():
    decoded = base64url_decode("SGVsbG8tV29ybGRf")
    assert base64url_encode(decoded) == "SGVsbG8tV29ybGRf"


def test_encode_hello_has_no_special_chars():
    encoded = base64url_encode(b"hello")
    assert "=" not in encoded
    assert "+" not in encoded
    assert "/" not in encoded
    assert base64url_decode(encoded) == b"hello"


@pytest.mark.parametrize("length", range(0, 20))
def test_roundtrip_all_lengths(length):
    data = bytes((i * 37) % 256 for i in range(length))
    assert base64url_decode(base64url_encode(data)) == data


def test_invalid_input_raises():
    with pytest.raises(Base64Error):
        base64url_decode("a!b@")


def test_invalid_length_raises_mega_error():
    with pytest.raises(MegaError):
        base64url_decode("abcde")