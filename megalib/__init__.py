"""MEGA protocol building blocks: base64, AES and RSA helpers, login key handling and an API client."""

__version__ = "0.3.0"

__all__ = ["aes", "api", "auth", "b64", "errors", "random_key", "rsa"]