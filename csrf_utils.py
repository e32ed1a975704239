"""
Stateless CSRF tokens.

A token is "{timestamp}:{nonce}:{signature}" where the signature is an
HMAC-SHA256 over "{timestamp}:{nonce}" keyed with a process-lifetime secret.
Nothing is stored server side, so a token stays valid for its whole window
and may be replayed within it.
"""
import hashlib
import hmac
import re
import secrets
import time
from typing import Callable

SECRET_BYTES = 32
NONCE_BYTES = 16
DEFAULT_MAX_AGE = 3600
DEFAULT_CLOCK_SKEW = 60

_TIMESTAMP_RE = re.compile(r"[0-9]{1,20}")


class CsrfError(Exception):
    """Base class for rejected CSRF tokens."""


class Malformed(CsrfError):
    pass


class InvalidSignature(CsrfError):
    pass


class Expired(CsrfError):
    pass


def create_secret() -> bytes:
    return secrets.token_bytes(SECRET_BYTES)


def sign(secret: bytes, message: bytes) -> bytes:
    return hmac.new(secret, message, hashlib.sha256).digest()


def verify(secret: bytes, message: bytes, mac: bytes) -> bool:
    return hmac.compare_digest(sign(secret, message), mac)


class CsrfTokenService:
    def __init__(
        self,
        secret: bytes,
        max_age: int = DEFAULT_MAX_AGE,
        clock_skew: int = DEFAULT_CLOCK_SKEW,
        clock: Callable[[], float] = time.time,
    ):
        if len(secret) < SECRET_BYTES:
            raise ValueError(f"CSRF secret must be at least {SECRET_BYTES} bytes")
        self._secret = secret
        self.max_age = max_age
        self.clock_skew = clock_skew
        self._clock = clock

    def __repr__(self) -> str:
        return f"CsrfTokenService(max_age={self.max_age}, clock_skew={self.clock_skew})"

    def _now(self) -> int:
        return int(self._clock())

    def generate(self) -> str:
        timestamp = self._now()
        nonce = secrets.token_hex(NONCE_BYTES)
        payload = f"{timestamp}:{nonce}"
        signature = sign(self._secret, payload.encode("ascii")).hex()
        return f"{payload}:{signature}"

    def validate(self, token: str) -> None:
        """Raise a CsrfError subclass unless *token* is genuine and fresh."""
        if not isinstance(token, str):
            raise Malformed("token is not a string")

        parts = token.split(":")
        if len(parts) != 3 or not all(parts):
            raise Malformed("expected three colon-separated fields")
        timestamp_str, nonce, signature_hex = parts

        if not _TIMESTAMP_RE.fullmatch(timestamp_str):
            raise Malformed("timestamp is not an integer")
        timestamp = int(timestamp_str)

        try:
            signature = bytes.fromhex(signature_hex)
        except ValueError:
            raise InvalidSignature("signature is not hex encoded") from None

        payload = f"{timestamp_str}:{nonce}".encode("utf-8")
        if not verify(self._secret, payload, signature):
            raise InvalidSignature("signature mismatch")

        age = self._now() - timestamp
        if age > self.max_age:
            raise Expired(f"token is {age}s old")
        if age < -self.clock_skew:
            raise Expired("token timestamp is in the future")
