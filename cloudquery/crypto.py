"""
Request signing primitives: URL-safe SHA-1 signatures and nonces.
"""

import base64
import hashlib
import secrets
import time

from .constants import SIGNING_METHOD

# Width of the random part of a nonce, in decimal digits
NONCE_DIGITS = 16


def _flatten(tokens):
    for token in tokens:
        if isinstance(token, (list, tuple)):
            yield from _flatten(token)
        else:
            yield str(token)


def sign(*tokens) -> str:
    """
    Generate a URL-safe SHA-1 signature over concatenated tokens.

    Format: base64url(SHA1(token1 + token2 + ...)), padding retained.
    SHA-1 is what the service verifies (``x_method=SHA1``).

    Args:
        *tokens: Strings to sign, nested lists and tuples are flattened

    Returns:
        Base64 signature using the ``-_`` alphabet
    """
    message = ''.join(_flatten(tokens))
    digest = hashlib.sha1(message.encode('utf-8')).digest()
    return base64.urlsafe_b64encode(digest).decode('ascii')


def nonce() -> str:
    """Return ``<random digits>.<unix seconds>``, unique per request."""
    random_digits = secrets.randbelow(10 ** NONCE_DIGITS)
    return f"{random_digits:0{NONCE_DIGITS}d}.{int(time.time())}"


def now_in_milliseconds() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


__all__ = ["sign", "nonce", "now_in_milliseconds", "SIGNING_METHOD"]
