"""
WOO X Request Signing

Private WOO X endpoints are authenticated with an HMAC-SHA256 signature
over the request's query string, keyed by the account's API secret.

The query string is canonical: parameters sorted lexicographically by key
and URL-encoded. The same canonical string is sent as the request's query,
so the signature covers exactly what the server receives and is stable
for equal parameter sets regardless of insertion order.

Example:
    >>> query, signature = sign_params({"timestamp": 1704110400000, "page": 1}, "secret")
    >>> query
    'page=1&timestamp=1704110400000'
"""

import hashlib
import hmac
from typing import Dict, Mapping, Tuple, Union
from urllib.parse import urlencode

from core.exceptions import InvalidCredential

ParamValue = Union[str, int, float]


def canonical_query(params: Mapping[str, ParamValue]) -> str:
    """Serialize parameters as a key-sorted, URL-encoded query string."""
    return urlencode(sorted((key, str(value)) for key, value in params.items()))


def generate_signature(params: Mapping[str, ParamValue], secret: str) -> str:
    """
    HMAC-SHA256 hex digest of the canonical query string.

    Raises:
        InvalidCredential: If the secret is empty
    """
    if not secret:
        raise InvalidCredential("WOO X API secret is empty; refusing to sign")

    return hmac.new(
        secret.encode("utf-8"),
        canonical_query(params).encode("utf-8"),
        hashlib.sha256
    ).hexdigest()


def sign_params(params: Mapping[str, ParamValue], secret: str) -> Tuple[str, str]:
    """Return ``(canonical_query, signature)`` for a private request."""
    return canonical_query(params), generate_signature(params, secret)


def auth_headers(api_key: str, signature: str) -> Dict[str, str]:
    """Headers carrying the public key identifier and the signature."""
    if not api_key:
        raise InvalidCredential("WOO X API key is empty")
    return {
        "x-api-key": api_key,
        "x-api-signature": signature,
    }
