"""
AWS signing helper - Request Signing Module

AWS4-X509 (asymmetric SigV4) request signing with RSA and ECDSA keys.
This module builds canonical requests and attaches certificate-based
Authorization headers to outgoing requests.
"""

from .types import (
    HttpMethod,
    SignableRequest,
    SignerParams,
    SignatureResult,
)

from .canonical_request import (
    CanonicalRequestBuilder,
    IGNORED_HEADERS,
    build_authorization_header,
    build_canonical_request,
    create_string_to_sign,
    signing_algorithm,
)

from .x509_signer import (
    RolesAnywhereSigner,
    certificate_chain_to_string,
    create_signer,
)

from .utils import (
    canonical_query_string,
    canonical_uri,
    format_rfc3339_timestamp,
    normalize_header_value,
    parse_rfc3339_timestamp,
    payload_hash,
    uri_encode,
)

# Public API exports
__all__ = [
    # Types
    'HttpMethod',
    'SignableRequest',
    'SignerParams',
    'SignatureResult',
    # Canonical request
    'CanonicalRequestBuilder',
    'IGNORED_HEADERS',
    'build_authorization_header',
    'build_canonical_request',
    'create_string_to_sign',
    'signing_algorithm',
    # Signer
    'RolesAnywhereSigner',
    'certificate_chain_to_string',
    'create_signer',
    # Utilities
    'canonical_query_string',
    'canonical_uri',
    'format_rfc3339_timestamp',
    'normalize_header_value',
    'parse_rfc3339_timestamp',
    'payload_hash',
    'uri_encode',
]
