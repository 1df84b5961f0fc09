"""Exception types raised by megalib."""

from __future__ import annotations


class MegaError(Exception):
    """Base class for every megalib error; also used for custom messages."""


class HttpError(MegaError):
    """HTTP request finished with a non-success status code."""

    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(f"HTTP error: {status}")


class RequestError(MegaError):
    """The network request itself failed."""

    def __init__(self, reason: object) -> None:
        self.reason = reason
        super().__init__(f"Request error: {reason}")


class JsonError(MegaError):
    """A response could not be parsed or a request could not be serialised."""

    def __init__(self, reason: object) -> None:
        self.reason = reason
        super().__init__(f"JSON error: {reason}")


class ServerBusyError(MegaError):
    """The server kept asking to retry for too long."""

    def __init__(self) -> None:
        super().__init__("Server busy, try again later")


class InvalidResponseError(MegaError):
    """The server returned something unexpected."""

    def __init__(self) -> None:
        super().__init__("Invalid response from server")


class ApiError(MegaError):
    """The API answered with one of its numeric error codes."""

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"API error: {code} - {message}")


class CryptoError(MegaError):
    """A cryptographic operation failed."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Crypto error: {reason}")


class InvalidChallengeError(MegaError):
    """Challenge verification failed during registration."""

    def __init__(self) -> None:
        super().__init__("Invalid challenge response")


class Base64Error(MegaError, ValueError):
    """Base64 input could not be decoded."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Base64 decode error: {reason}")


class InvalidStateError(MegaError):
    """A serialised state string had the wrong format."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid state format: {reason}")