"""
Certificate, private key and signature operations for the AWS signing helper
"""

from .certificates import (
    KeyType,
    CertificateData,
    certificate_to_data,
    parse_certificate_pem,
    parse_certificate_bundle_pem,
    read_certificate_data,
    read_certificate_bundle_data,
)

from .signatures import (
    DigestAlgorithm,
    SigningCapability,
    RSASigningCapability,
    ECDSASigningCapability,
    SigningOpts,
    SigningResult,
    create_signing_capability,
    sign,
    verify_signature,
)

from .private_keys import (
    PrivateKeyMaterial,
    parse_private_key_pem,
    read_private_key_data,
)

__all__ = [
    # Certificates
    'KeyType',
    'CertificateData',
    'certificate_to_data',
    'parse_certificate_pem',
    'parse_certificate_bundle_pem',
    'read_certificate_data',
    'read_certificate_bundle_data',
    # Signatures
    'DigestAlgorithm',
    'SigningCapability',
    'RSASigningCapability',
    'ECDSASigningCapability',
    'SigningOpts',
    'SigningResult',
    'create_signing_capability',
    'sign',
    'verify_signature',
    # Private keys
    'PrivateKeyMaterial',
    'parse_private_key_pem',
    'read_private_key_data',
]
