"""
Canonical request construction for AWS4-X509 request signing

The canonical request and the string to sign must match, byte for byte, what
the remote verifier computes. Everything here is a pure function of the
request fields, headers and signing parameters.

Canonical request layout::

    METHOD
    canonical URI
    canonical query string
    name:value           (one line per signed header, sorted)

    signed;header;names
    hex(sha256(body))
"""

from typing import Tuple

from ..crypto.certificates import KeyType
from ..crypto.signatures import DigestAlgorithm
from .types import SignableRequest, SignerParams
from .utils import (
    canonical_query_string,
    canonical_uri,
    normalize_header_name,
    normalize_header_value,
    payload_hash,
    sorted_header_names,
)

ALGORITHM_PREFIX = 'AWS4-X509'

# Never signed, even when present on the request
IGNORED_HEADERS = ['authorization', 'user-agent', 'x-amzn-trace-id']


def signing_algorithm(key_type: KeyType, digest: DigestAlgorithm = DigestAlgorithm.SHA256) -> str:
    """
    Algorithm identifier for a key family and digest.

    >>> signing_algorithm(KeyType.EC, DigestAlgorithm.SHA384)
    'AWS4-X509-ECDSA-SHA384'
    """
    family = 'RSA' if key_type == KeyType.RSA else 'ECDSA'
    return f'{ALGORITHM_PREFIX}-{family}-{digest.value}'


class CanonicalRequestBuilder:
    """
    Canonical request builder for AWS4-X509 signatures
    """

    def __init__(self, request: SignableRequest, content_sha256: str = None):
        """
        Initialize canonical request builder.

        Args:
            request: Request with every header that is to be signed already set
            content_sha256: Hex SHA-256 of the body; computed from the body if omitted
        """
        self.request = request
        self.content_sha256 = content_sha256 or payload_hash(request.body)

    def build(self) -> Tuple[str, str]:
        """
        Build the canonical request.

        Returns:
            tuple: (canonical request, signed headers string)
        """
        canonical_headers, signed_headers = self.build_canonical_headers()

        lines = [
            self.request.method.value,
            canonical_uri(self.request.url),
            canonical_query_string(self.request.url),
            canonical_headers,
            '',
            signed_headers,
            self.content_sha256,
        ]
        return '\n'.join(lines), signed_headers

    def build_canonical_headers(self) -> Tuple[str, str]:
        """
        Render signed headers as sorted ``name:value`` lines.

        Returns:
            tuple: (canonical header lines, signed headers string)
        """
        values = {}
        for name, value in self.request.headers.items():
            values[normalize_header_name(name)] = normalize_header_value(value)

        names = sorted_header_names(values, IGNORED_HEADERS)
        canonical_headers = '\n'.join(f'{name}:{values[name]}' for name in names)
        return canonical_headers, ';'.join(names)


def build_canonical_request(request: SignableRequest, content_sha256: str = None) -> Tuple[str, str]:
    """
    Build the canonical request for a signable request.

    Args:
        request: Request to canonicalize
        content_sha256: Optional precomputed body hash

    Returns:
        tuple: (canonical request, signed headers string)
    """
    return CanonicalRequestBuilder(request, content_sha256).build()


def create_string_to_sign(
    canonical_request: str,
    params: SignerParams,
    digest: DigestAlgorithm = DigestAlgorithm.SHA256
) -> str:
    """
    Derive the string to sign from a canonical request.

    Args:
        canonical_request: Output of build_canonical_request
        params: Signing time, scope and algorithm
        digest: Digest applied to the canonical request

    Returns:
        str: algorithm, timestamp, scope and hashed canonical request, one per line
    """
    return '\n'.join([
        params.algorithm,
        params.formatted_signing_date_time(),
        params.scope(),
        digest.hexdigest(canonical_request.encode('utf-8')),
    ])


def build_authorization_header(
    params: SignerParams,
    serial_number: str,
    signed_headers: str,
    signature: str
) -> str:
    """
    Build the Authorization header value.

    The credential is the certificate serial number followed by the scope.
    """
    credential = f'Credential={serial_number}/{params.scope()}'
    return (
        f'{params.algorithm} '
        f'{credential}, SignedHeaders={signed_headers}, Signature={signature}'
    )
