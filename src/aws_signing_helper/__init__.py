"""
AWS signing helper
Temporary AWS credentials from an X.509 certificate and private key
"""

from .version import __version__
from .crypto import (
    KeyType,
    CertificateData,
    read_certificate_data,
    read_certificate_bundle_data,
    PrivateKeyMaterial,
    read_private_key_data,
    DigestAlgorithm,
    SigningCapability,
    RSASigningCapability,
    ECDSASigningCapability,
    SigningOpts,
    SigningResult,
    sign,
    verify_signature,
)
from .exceptions import (
    SigningHelperError,
    ValidationError,
    CertificateParseError,
    KeyParseError,
    SigningError,
    NetworkError,
    ProtocolError,
    AuthenticationError,
)
from .signing import (
    HttpMethod,
    SignableRequest,
    SignerParams,
    SignatureResult,
    RolesAnywhereSigner,
    create_signer,
    build_canonical_request,
    create_string_to_sign,
    build_authorization_header,
    signing_algorithm,
)
from .config import (
    CredentialsOpts,
    parse_region_from_arn,
)
from .http_client import (
    Credentials,
    SessionClient,
    parse_create_session_response,
)
from .credentials import (
    CredentialProcessOutput,
    build_create_session_request,
    generate_credentials,
)

# Public API exports
__all__ = [
    '__version__',
    # Certificates and keys
    'KeyType',
    'CertificateData',
    'read_certificate_data',
    'read_certificate_bundle_data',
    'PrivateKeyMaterial',
    'read_private_key_data',
    # Signing capability
    'DigestAlgorithm',
    'SigningCapability',
    'RSASigningCapability',
    'ECDSASigningCapability',
    'SigningOpts',
    'SigningResult',
    'sign',
    'verify_signature',
    # Exceptions
    'SigningHelperError',
    'ValidationError',
    'CertificateParseError',
    'KeyParseError',
    'SigningError',
    'NetworkError',
    'ProtocolError',
    'AuthenticationError',
    # Request signing
    'HttpMethod',
    'SignableRequest',
    'SignerParams',
    'SignatureResult',
    'RolesAnywhereSigner',
    'create_signer',
    'build_canonical_request',
    'create_string_to_sign',
    'build_authorization_header',
    'signing_algorithm',
    # Configuration
    'CredentialsOpts',
    'parse_region_from_arn',
    # Session exchange
    'Credentials',
    'SessionClient',
    'parse_create_session_response',
    'CredentialProcessOutput',
    'build_create_session_request',
    'generate_credentials',
]
