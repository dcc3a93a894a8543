"""OAuth 1.0 (Token-Based Authentication) request signing for NetSuite.

NetSuite's REST endpoints authenticate each request with a one-time
`Authorization: OAuth ...` header signed with HMAC-SHA256. The canonical form has
to be byte-exact or NetSuite answers 401 with no further detail, so every step
lives in its own small function and is unit-tested on its own.

Steps
- percent-encode keys and values (RFC 3986 unreserved set only; `!*'()` escaped)
- sort by encoded key, join as `k=v&k=v`
- base string: `METHOD&enc(url)&enc(params)`
- key: `enc(consumer_secret)&enc(token_secret)`
- signature: base64(HMAC-SHA256(key, base))

No network calls and no retries here.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
from typing import Iterable, Mapping
from urllib.parse import parse_qsl, quote, urlsplit, urlunsplit

from src.arsync.errors import SignatureError

SIGNATURE_METHOD = "HMAC-SHA256"
OAUTH_VERSION = "1.0"

# Letters, digits and these four are the only characters left literal.
_UNRESERVED = "-._~"


def percent_encode(value: str) -> str:
    """Percent-encode `value` for the OAuth signing base.

    Stricter than `encodeURIComponent`-style encoders: `!`, `*`, `'`, `(` and `)`
    are escaped as well. Non-ASCII text is encoded as UTF-8 with uppercase hex.
    """

    if not isinstance(value, str):
        raise SignatureError(f"Cannot percent-encode {type(value).__name__}")
    return quote(value, safe=_UNRESERVED)


def generate_nonce() -> str:
    """32 hex chars from 16 bytes of CSPRNG output."""

    return secrets.token_hex(16)


def generate_timestamp() -> str:
    return str(int(time.time()))


def normalize_parameters(params: Mapping[str, str] | Iterable[tuple[str, str]]) -> str:
    """Encode, sort and join parameters into the `k=v&k=v` form.

    Input order never matters: pairs are sorted by encoded key, then encoded value.
    """

    items = params.items() if isinstance(params, Mapping) else params
    encoded = sorted((percent_encode(k), percent_encode(v)) for k, v in items)
    return "&".join(f"{k}={v}" for k, v in encoded)


def _split_query(url: str) -> tuple[str, list[tuple[str, str]]]:
    """Return (url without query/fragment, query parameters).

    A URL without a query string is returned unchanged.
    """

    parts = urlsplit(url)
    if not parts.query:
        return url, []
    base = urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
    return base, parse_qsl(parts.query, keep_blank_values=True)


def build_signature_base(
    http_method: str,
    target_url: str,
    params: Mapping[str, str] | Iterable[tuple[str, str]],
) -> str:
    """Build `METHOD&enc(url)&enc(normalized params)`.

    Query parameters on `target_url` are signed as part of the parameter set and
    stripped from the URL component.
    """

    base_url, query_params = _split_query(target_url)
    items = list(params.items() if isinstance(params, Mapping) else params)
    param_string = normalize_parameters(items + query_params)
    return "&".join(
        [http_method.upper(), percent_encode(base_url), percent_encode(param_string)]
    )


def sign(signature_base: str, consumer_secret: str, token_secret: str) -> str:
    """Return base64(HMAC-SHA256) of the signature base."""

    signing_key = f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"
    digest = hmac.new(
        signing_key.encode("utf-8"),
        signature_base.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def _require(name: str, value: object) -> str:
    if not isinstance(value, str) or not value:
        raise SignatureError(f"OAuth signing input '{name}' is missing or not a string")
    return value


def generate_auth_header(
    *,
    http_method: str,
    target_url: str,
    consumer_key: str,
    consumer_secret: str,
    token_id: str,
    token_secret: str,
    realm: str,
    nonce: str | None = None,
    timestamp: str | None = None,
) -> str:
    """Build a single-use `Authorization` header value.

    `nonce` and `timestamp` are generated fresh unless passed in; only tests
    should pass them.
    """

    _require("http_method", http_method)
    _require("target_url", target_url)
    _require("consumer_key", consumer_key)
    _require("consumer_secret", consumer_secret)
    _require("token_id", token_id)
    _require("token_secret", token_secret)
    _require("realm", realm)
    if not target_url.lower().startswith(("https://", "http://")):
        raise SignatureError(f"target_url must be absolute: {target_url!r}")

    params: dict[str, str] = {
        "oauth_consumer_key": consumer_key,
        "oauth_token": token_id,
        "oauth_signature_method": SIGNATURE_METHOD,
        "oauth_timestamp": timestamp or generate_timestamp(),
        "oauth_nonce": nonce or generate_nonce(),
        "oauth_version": OAUTH_VERSION,
    }

    base = build_signature_base(http_method, target_url, params)
    params["oauth_signature"] = sign(base, consumer_secret, token_secret)

    pairs = ", ".join(f'{k}="{percent_encode(v)}"' for k, v in params.items())
    return f'OAuth realm="{realm}", {pairs}'
