"""
Private key loading for the AWS signing helper

Reads RSA and EC private keys from PEM files in either the traditional
(PKCS#1 / SEC1) or the PKCS#8 container and tags them with their key family.
"""

import re
import base64
import binascii
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from ..exceptions import KeyParseError, SigningError
from .certificates import KeyType
from .signatures import PublicKey, SigningCapability, create_signing_capability

logger = logging.getLogger(__name__)

PEM_PRIVATE_KEY_PATTERN = re.compile(
    rb'-----BEGIN (?P<label>(?:RSA |EC |ENCRYPTED )?PRIVATE KEY)-----\r?\n'
    rb'(?P<body>.*?)'
    rb'-----END (?P=label)-----',
    re.DOTALL
)

PrivateKey = Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey]


@dataclass(frozen=True)
class PrivateKeyMaterial:
    """
    A private key tagged with its algorithm family.

    The signing capability is selected once from the key itself and reused
    for every signature made with this material.

    Attributes:
        key: RSA or EC private key
        key_type: Algorithm family of the key
    """
    key: PrivateKey = field(repr=False)
    key_type: KeyType
    signing_capability: SigningCapability = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        try:
            capability = create_signing_capability(self.key)
        except SigningError as e:
            raise KeyParseError(
                f"unable to parse private key: {e}",
                "UNSUPPORTED_KEY_TYPE"
            ) from e

        if capability.key_type != self.key_type:
            raise KeyParseError(
                f"unable to parse private key: {self.key_type.value} tag does not match "
                f"{capability.key_type.value} key",
                "KEY_TYPE_MISMATCH"
            )

        object.__setattr__(self, 'signing_capability', capability)

    @classmethod
    def from_key(cls, key: PrivateKey) -> 'PrivateKeyMaterial':
        """
        Wrap an already loaded private key.

        Any object implementing cryptography's RSA or EC private key
        interface is accepted, including keys backed by external stores.
        """
        if isinstance(key, rsa.RSAPrivateKey):
            return cls(key=key, key_type=KeyType.RSA)
        if isinstance(key, ec.EllipticCurvePrivateKey):
            return cls(key=key, key_type=KeyType.EC)

        raise KeyParseError(
            f"unable to parse private key: unsupported key type {type(key).__name__}",
            "UNSUPPORTED_KEY_TYPE"
        )

    def public_key(self) -> PublicKey:
        return self.key.public_key()


def _load_traditional_or_pkcs8(block: bytes, body: bytes):
    # PEM loading honours the block label: PKCS#1, SEC1 or PKCS#8
    try:
        return serialization.load_pem_private_key(block, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as pem_error:
        logger.debug(f"PEM private key load failed, retrying as DER: {pem_error}")

    # Mislabelled blocks: decode the body and let the DER loader try both containers
    try:
        der = base64.b64decode(b''.join(body.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise KeyParseError(
            f"unable to parse private key: invalid base64 body: {e}",
            details={"original_error": str(e)}
        ) from e

    try:
        return serialization.load_der_private_key(der, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyParseError(
            f"unable to parse private key: {e}",
            details={"original_error": str(e)}
        ) from e


def parse_private_key_pem(data: bytes) -> PrivateKeyMaterial:
    """
    Parse the first PEM private key block in data.

    Args:
        data: PEM encoded bytes

    Returns:
        PrivateKeyMaterial: Loaded key tagged with its family

    Raises:
        KeyParseError: If no supported, unencrypted RSA or EC key is found
    """
    match = PEM_PRIVATE_KEY_PATTERN.search(data)
    if match is None:
        raise KeyParseError("unable to parse private key: no PEM private key block found")

    if match.group('label') == b'ENCRYPTED PRIVATE KEY':
        raise KeyParseError(
            "unable to parse private key: encrypted private keys are not supported",
            "ENCRYPTED_KEY"
        )

    key = _load_traditional_or_pkcs8(match.group(0), match.group('body'))
    return PrivateKeyMaterial.from_key(key)


def read_private_key_data(path: Union[str, Path]) -> PrivateKeyMaterial:
    """
    Read an RSA or EC private key from a PEM file.

    Args:
        path: Path to a PKCS#1, SEC1 or PKCS#8 PEM file

    Returns:
        PrivateKeyMaterial: Loaded key tagged with its family

    Raises:
        KeyParseError: If the file cannot be read or parsed
    """
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise KeyParseError(
            f"unable to parse private key: failed to read {path}: {e}",
            "FILE_ERROR",
            {"path": str(path)}
        ) from e

    try:
        material = parse_private_key_pem(data)
    except KeyParseError as e:
        e.details.setdefault("path", str(path))
        raise

    logger.debug(f"Loaded {material.key_type.value} private key from {path}")
    return material
