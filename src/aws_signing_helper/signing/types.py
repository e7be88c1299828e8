"""
Type definitions for X.509 request signing

This module provides the request, parameter and result types used by the
AWS4-X509 (asymmetric SigV4) signer.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Union
from dataclasses import dataclass, field
from enum import Enum


class HttpMethod(str, Enum):
    """HTTP methods supported for signing"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


HeaderValue = Union[str, List[str]]
RequestBody = Union[str, bytes, None]

AMZ_DATE_FORMAT = '%Y%m%dT%H%M%SZ'
SHORT_DATE_FORMAT = '%Y%m%d'
SCOPE_TERMINATOR = 'aws4_request'


@dataclass
class SignableRequest:
    """
    Outgoing HTTP request to be signed

    Header names are stored lower-cased. A header may carry several values
    as a list; they are joined with commas when canonicalized.

    Attributes:
        method: HTTP method (GET, POST, etc.)
        url: Complete request URL, including any query string
        headers: Request headers
        body: Optional request body (string or bytes)
    """
    method: HttpMethod
    url: str
    headers: Dict[str, HeaderValue] = field(default_factory=dict)
    body: RequestBody = None

    def __post_init__(self):
        """Validate request after initialization"""
        if not self.url:
            raise ValueError("Request URL cannot be empty")

        if not isinstance(self.headers, dict):
            raise ValueError("Headers must be a dictionary")

        if not isinstance(self.method, HttpMethod):
            self.method = HttpMethod(str(self.method).upper())

        self.headers = {k.lower(): v for k, v in self.headers.items()}

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes; an absent body is empty."""
        if self.body is None:
            return b''
        if isinstance(self.body, str):
            return self.body.encode('utf-8')
        return self.body

    def has_body(self) -> bool:
        return len(self.body_bytes) > 0


@dataclass(frozen=True)
class SignerParams:
    """
    Parameters shared by the string to sign and the Authorization header

    Attributes:
        signing_time: Instant the request is signed at
        region: Region of the credential scope
        service: Service name of the credential scope
        algorithm: Signing algorithm identifier, e.g. AWS4-X509-RSA-SHA256
    """
    signing_time: datetime
    region: str
    service: str
    algorithm: str

    def __post_init__(self):
        if self.signing_time.tzinfo is None:
            # Naive instants are taken to be UTC
            object.__setattr__(self, 'signing_time', self.signing_time.replace(tzinfo=timezone.utc))
        else:
            object.__setattr__(self, 'signing_time', self.signing_time.astimezone(timezone.utc))

        if not self.region:
            raise ValueError("Region cannot be empty")
        if not self.service:
            raise ValueError("Service cannot be empty")

    def formatted_signing_date_time(self) -> str:
        return self.signing_time.strftime(AMZ_DATE_FORMAT)

    def formatted_short_signing_date(self) -> str:
        return self.signing_time.strftime(SHORT_DATE_FORMAT)

    def scope(self) -> str:
        """Credential scope: date/region/service/aws4_request."""
        return '/'.join([
            self.formatted_short_signing_date(),
            self.region,
            self.service,
            SCOPE_TERMINATOR,
        ])


@dataclass(frozen=True)
class SignatureResult:
    """
    Result of signing one request

    Attributes:
        headers: Every header the signer set on the request
        canonical_request: Canonical request that was hashed
        string_to_sign: String whose digest was signed
        signed_headers: Semicolon separated signed header names
        signature: Hex encoded signature
    """
    headers: Dict[str, str]
    canonical_request: str
    string_to_sign: str
    signed_headers: str
    signature: str

    @property
    def authorization(self) -> Optional[str]:
        return self.headers.get('authorization')
