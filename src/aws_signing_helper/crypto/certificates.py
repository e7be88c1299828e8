"""
X.509 certificate loading for the AWS signing helper

This module reads PEM encoded certificates and certificate bundles and
classifies the public key of each leaf certificate. No chain validation is
performed; only the fields needed for request signing are extracted.
"""

import re
import base64
import logging
from enum import Enum
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Optional, Union

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from ..exceptions import CertificateParseError

logger = logging.getLogger(__name__)

PEM_CERTIFICATE_PATTERN = re.compile(
    rb'-----BEGIN CERTIFICATE-----\r?\n.*?-----END CERTIFICATE-----',
    re.DOTALL
)

# Attribute names of cryptography's KeyUsage extension, in RFC 5280 bit order
KEY_USAGE_ATTRIBUTES = (
    'digital_signature',
    'content_commitment',
    'key_encipherment',
    'data_encipherment',
    'key_agreement',
    'key_cert_sign',
    'crl_sign',
    'encipher_only',
    'decipher_only',
)


class KeyType(str, Enum):
    """Public key algorithm families accepted for signing"""
    RSA = "RSA"
    EC = "EC"


@dataclass(frozen=True)
class CertificateData:
    """
    Fields of a leaf certificate needed to sign requests.

    Attributes:
        key_type: Algorithm family of the certificate's public key
        certificate_data: Base64 encoded DER bytes of the certificate
        serial_number: Certificate serial number as a decimal string
        key_usage: Names of the key usages asserted by the certificate
        certificate: Parsed certificate object
    """
    key_type: KeyType
    certificate_data: str
    serial_number: str
    key_usage: List[str] = field(default_factory=list)
    certificate: Optional[x509.Certificate] = field(default=None, repr=False, compare=False)

    @property
    def der_bytes(self) -> bytes:
        """DER bytes of the certificate."""
        return base64.b64decode(self.certificate_data)


def _classify_public_key(certificate: x509.Certificate) -> KeyType:
    try:
        public_key = certificate.public_key()
    except UnsupportedAlgorithm as e:
        raise CertificateParseError(
            f"could not parse certificate: unsupported public key algorithm: {e}",
            "UNSUPPORTED_KEY_TYPE",
            {"original_error": str(e)}
        ) from e
    except ValueError as e:
        raise CertificateParseError(
            f"could not parse certificate public key: {e}",
            details={"original_error": str(e)}
        ) from e

    if isinstance(public_key, rsa.RSAPublicKey):
        return KeyType.RSA
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        return KeyType.EC

    raise CertificateParseError(
        f"could not parse certificate: unsupported public key algorithm {type(public_key).__name__}",
        "UNSUPPORTED_KEY_TYPE"
    )


def _extract_key_usage(certificate: x509.Certificate) -> List[str]:
    try:
        key_usage = certificate.extensions.get_extension_for_class(x509.KeyUsage).value
    except x509.ExtensionNotFound:
        return []
    except ValueError as e:
        raise CertificateParseError(
            f"could not parse certificate extensions: {e}",
            details={"original_error": str(e)}
        ) from e

    usages = []
    for name in KEY_USAGE_ATTRIBUTES:
        try:
            if getattr(key_usage, name):
                usages.append(name)
        except ValueError:
            # encipher_only/decipher_only are undefined without key_agreement
            continue
    return usages


def certificate_to_data(certificate: x509.Certificate) -> CertificateData:
    """
    Build CertificateData from a parsed certificate.

    Args:
        certificate: Parsed X.509 certificate

    Returns:
        CertificateData: Extracted signing fields

    Raises:
        CertificateParseError: If the key algorithm is neither RSA nor EC
    """
    key_type = _classify_public_key(certificate)
    der = certificate.public_bytes(serialization.Encoding.DER)

    return CertificateData(
        key_type=key_type,
        certificate_data=base64.b64encode(der).decode('ascii'),
        serial_number=str(certificate.serial_number),
        key_usage=_extract_key_usage(certificate),
        certificate=certificate,
    )


def _load_pem_block(block: bytes) -> x509.Certificate:
    try:
        return x509.load_pem_x509_certificate(block)
    except ValueError as e:
        raise CertificateParseError(
            f"could not parse certificate: {e}",
            details={"original_error": str(e)}
        ) from e


def parse_certificate_pem(data: bytes) -> CertificateData:
    """
    Parse the first PEM certificate block in data.

    Args:
        data: PEM encoded bytes

    Returns:
        CertificateData: Extracted signing fields

    Raises:
        CertificateParseError: If no valid certificate block is found
    """
    match = PEM_CERTIFICATE_PATTERN.search(data)
    if match is None:
        raise CertificateParseError("could not parse certificate: no PEM certificate block found")

    return certificate_to_data(_load_pem_block(match.group(0)))


def parse_certificate_bundle_pem(data: bytes) -> List[CertificateData]:
    """
    Parse every PEM certificate block in data, in order.

    An input without certificate blocks yields an empty list.
    """
    return [
        certificate_to_data(_load_pem_block(match.group(0)))
        for match in PEM_CERTIFICATE_PATTERN.finditer(data)
    ]


def _read_file(path: Union[str, Path]) -> bytes:
    try:
        with open(path, 'rb') as f:
            return f.read()
    except OSError as e:
        raise CertificateParseError(
            f"could not parse certificate: failed to read {path}: {e}",
            "FILE_ERROR",
            {"path": str(path)}
        ) from e


def read_certificate_data(path: Union[str, Path]) -> CertificateData:
    """
    Read a single PEM certificate from a file.

    Args:
        path: Path to the PEM certificate file

    Returns:
        CertificateData: Extracted signing fields

    Raises:
        CertificateParseError: If the file cannot be read or parsed
    """
    data = _read_file(path)
    try:
        certificate_data = parse_certificate_pem(data)
    except CertificateParseError as e:
        e.details.setdefault("path", str(path))
        raise

    logger.debug(f"Loaded {certificate_data.key_type.value} certificate {certificate_data.serial_number} from {path}")
    return certificate_data


def read_certificate_bundle_data(path: Union[str, Path]) -> List[CertificateData]:
    """
    Read all PEM certificates from a bundle file, in file order.

    Args:
        path: Path to the PEM bundle

    Returns:
        list: CertificateData for each certificate in the bundle

    Raises:
        CertificateParseError: If the file cannot be read or any block is malformed
    """
    data = _read_file(path)
    try:
        bundle = parse_certificate_bundle_pem(data)
    except CertificateParseError as e:
        e.details.setdefault("path", str(path))
        raise

    logger.debug(f"Loaded {len(bundle)} certificates from bundle {path}")
    return bundle
