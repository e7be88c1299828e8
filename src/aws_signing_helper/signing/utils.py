"""
Utility functions for request signing

This module provides URI encoding, header normalization, payload hashing
and timestamp helpers used by the canonical request builder.
"""

import re
import hashlib
from datetime import datetime, timezone
from typing import Dict, List
from urllib.parse import parse_qsl, quote, urlsplit

from .types import HeaderValue, RequestBody

EMPTY_PAYLOAD_SHA256 = hashlib.sha256(b'').hexdigest()

_WHITESPACE_RUN = re.compile(r'\s+')


def uri_encode(value: str, encode_slash: bool = True) -> str:
    """
    Percent-encode a value, leaving only RFC 3986 unreserved characters.

    Args:
        value: Value to encode
        encode_slash: Whether '/' is encoded

    Returns:
        str: Encoded value with upper-case hex escapes
    """
    return quote(value, safe='' if encode_slash else '/')


def canonical_uri(url: str) -> str:
    """
    Build the canonical URI from a request URL.

    The path is taken as it appears in the URL and encoded once more, with
    slashes preserved. An empty path becomes '/'.
    """
    path = urlsplit(url).path
    if not path:
        return '/'
    return uri_encode(path, encode_slash=False)


def canonical_query_string(url: str) -> str:
    """
    Build the canonical query string from a request URL.

    Parameters are decoded, re-encoded with the unreserved set, then sorted
    by name and value and joined with '&'.
    """
    query = urlsplit(url).query
    if not query:
        return ''

    pairs = [
        (uri_encode(name), uri_encode(value))
        for name, value in parse_qsl(query, keep_blank_values=True)
    ]
    pairs.sort()
    return '&'.join(f'{name}={value}' for name, value in pairs)


def normalize_header_name(name: str) -> str:
    return name.lower().strip()


def normalize_header_value(value: HeaderValue) -> str:
    """
    Normalize a header value for canonicalization.

    Lists are joined with ','. Each value is trimmed and internal runs of
    whitespace collapse to a single space.
    """
    if isinstance(value, (list, tuple)):
        return ','.join(normalize_header_value(v) for v in value)
    return _WHITESPACE_RUN.sub(' ', str(value).strip())


def payload_hash(body: RequestBody) -> str:
    """Hex SHA-256 of the request body; an absent body hashes as empty."""
    if body is None:
        return EMPTY_PAYLOAD_SHA256
    if isinstance(body, str):
        body = body.encode('utf-8')
    return hashlib.sha256(body).hexdigest()


def host_from_url(url: str) -> str:
    netloc = urlsplit(url).netloc
    # Drop any userinfo
    return netloc.rsplit('@', 1)[-1]


def sorted_header_names(headers: Dict[str, HeaderValue], ignored: List[str]) -> List[str]:
    return sorted(
        normalize_header_name(name) for name in headers
        if normalize_header_name(name) not in ignored
    )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_rfc3339_timestamp(value: datetime) -> str:
    """Format an aware datetime as an RFC 3339 UTC string."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def parse_rfc3339_timestamp(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp into an aware datetime.

    Raises:
        ValueError: If the value is not an RFC 3339 timestamp
    """
    if not isinstance(value, str) or not value:
        raise ValueError(f"Invalid RFC 3339 timestamp: {value!r}")

    normalized = value.strip()
    if normalized.endswith(('Z', 'z')):
        normalized = normalized[:-1] + '+00:00'

    # fromisoformat before 3.11 rejects fractional seconds other than 3 or 6 digits
    match = re.match(r'^(.*T\d{2}:\d{2}:\d{2})(\.\d+)?(.*)$', normalized)
    if match and match.group(2):
        fraction = (match.group(2)[1:] + '000000')[:6]
        normalized = f'{match.group(1)}.{fraction}{match.group(3)}'

    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None:
        raise ValueError(f"RFC 3339 timestamp lacks a UTC offset: {value!r}")
    return parsed.astimezone(timezone.utc)
